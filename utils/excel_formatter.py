"""
This class takes a DataFrame and writes it to a styled Excel table.

Used to export a read-only snapshot of the portfolio ledger after a refresh
run. If no output directory is given, files land in an 'output' folder at the
repo root.
"""

import os
import pathlib

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows
from openpyxl.worksheet.table import Table, TableStyleInfo

from ledger import is_failure
from models import LedgerRow


class ExcelFormatter:
    def __init__(self):
     # Create a reference to an empty Excel workbook
        self.wb = Workbook()
        self._table_names = set()

    def add_to_sheet(self, df: pd.DataFrame, sheet_name: str) -> None:
        """
        Add a dataframe to a sheet in the workbook as a styled table.

        :param df: The dataframe object which will be saved to the sheet
        :param sheet_name: The name of the sheet which will contain the data in df
        """
        ws = self.wb.active
     # Reuse the default sheet while it is still empty
        is_empty = ws.max_row <= 1 and ws.cell(1, 1).value is None

        if is_empty:
            ws.title = sheet_name
        elif sheet_name in self.wb.sheetnames:
            ws = self.wb[sheet_name]
        else:
            ws = self.wb.create_sheet(title=sheet_name)

        for row in dataframe_to_rows(df, index=False, header=True):
            ws.append(row)

     # Tables need a unique displayName without spaces
        table_ref = f"A1:{get_column_letter(ws.max_column)}{ws.max_row}"
        display_name = "".join(sheet_name.split(" "))
        base_name = display_name
        counter = 2
        while display_name in self._table_names:
            display_name = f"{base_name}_{counter}"
            counter += 1
        self._table_names.add(display_name)

        table = Table(displayName=display_name, ref=table_ref)
        table.tableStyleInfo = TableStyleInfo(
            name="TableStyleMedium9",
            showFirstColumn=False,
            showLastColumn=False,
            showRowStripes=True,
            showColumnStripes=False
        )
        ws.add_table(table)

     # Size columns to their content (sample the first 500 rows)
        sample = df.head(500)
        for i, col in enumerate(df.columns, start=1):
            max_len = max(len(str(cell)) for cell in [col] + sample[col].astype(str).tolist())
            ws.column_dimensions[get_column_letter(i)].width = min(max_len + 4, 60)

    def add_ledger_snapshot(self, rows: list[LedgerRow], sheet_name: str = "Portfolio", run_at: str = "") -> pd.DataFrame:
        """
        Write ledger rows with a status column; failed lookups are shown in red.

        :param rows: Snapshot rows from Ledger.snapshot()
        :param sheet_name: Target sheet
        :param run_at: Run timestamp, added as a column when given
        """
        df = pd.DataFrame([r.model_dump() for r in rows], columns=list(LedgerRow.model_fields))
        df["status"] = [
            "pending" if r.latest_observed is None else "failed" if is_failure(r.latest_observed) else "ok"
            for r in rows
        ]
        if run_at:
            df["run_at"] = run_at
     # Empty cells instead of NaN
        df = df.astype(object).where(pd.notna(df), None)
        self.add_to_sheet(df, sheet_name=sheet_name)

        ws = self.wb[sheet_name]
        status_col = list(df.columns).index("status") + 1
        for r in range(2, len(df) + 2):
            if ws.cell(r, status_col).value == "failed":
                ws.cell(r, status_col).font = Font(color="FF0000", bold=True)
        return df

    def save(self, filename: str, location: str = None) -> str | None:
        """
        Save the workbook as `filename` inside `location` (or ./output).

        :param filename: The name of the output file, must end in .xlsx
        :param location: [OPTIONAL] Existing directory to save into
        :return: The saved path, or None when the name or location was rejected
        """
        fpath = location if location else self.__create_output_dir()

        if not filename.lower().endswith(".xlsx"):
            print(f"The file name '{filename}' is NOT of type 'xlsx'. Please correct it.")
            self.__reset_workbook()
            return None

        if not fpath or not os.path.exists(fpath):
            print(f"The following file location does not exist: {fpath}. \n\tPlease enter a valid file location. ")
            self.__reset_workbook()
            return None

        spath = os.path.join(fpath, filename)
        self.wb.save(spath)
        self.__reset_workbook()
        return spath

    def __create_output_dir(self) -> str:
        """Create an 'output' folder at the repo root and return its path."""
        o_dir = pathlib.Path(__file__).parent.parent / "output"
        o_dir.mkdir(parents=True, exist_ok=True)
        return str(o_dir.resolve())

    def __reset_workbook(self):
        self.wb = Workbook()
        self._table_names = set()
