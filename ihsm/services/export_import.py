"""Spreadsheet export of team rosters."""

from __future__ import annotations

import io
import re
from typing import Iterable

import openpyxl
from openpyxl.styles import Font, PatternFill

from ihsm.models import Player, Team

ROSTER_SHEET = "Players"
ROSTER_HEADERS = ["No.", "Name", "Role", "Jersey Number", "Mobile Number", "T-shirt Size"]


def roster_filename(hostel_name: str, sport) -> str:
    """``<hostel>_<sport>_team.xlsx`` with filesystem-hostile characters replaced."""
    sport_value = getattr(sport, 'value', sport)
    base = re.sub(r'[^A-Za-z0-9_-]+', '_', f"{hostel_name}_{sport_value}_team").strip('_')
    return f"{base}.xlsx"


def _roster_rows(players: Iterable[Player]) -> list[list]:
    rows = []
    for index, player in enumerate(players, start=1):
        rows.append([
            index,
            player.name,
            player.role or '',
            player.jersey_number or '',
            player.mobile_number or '',
            player.tshirt_size.value if player.tshirt_size else '',
        ])
    return rows


def export_team_roster(team: Team) -> bytes:
    """
    Build an XLSX workbook of ``team``'s approved players.

    One header row followed by one row per player, in roster order.
    """
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = ROSTER_SHEET

    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")

    for col_idx, header in enumerate(ROSTER_HEADERS, start=1):
        cell = sheet.cell(row=1, column=col_idx, value=header)
        cell.fill = header_fill
        cell.font = header_font

    for row_idx, row in enumerate(_roster_rows(team.roster), start=2):
        for col_idx, value in enumerate(row, start=1):
            sheet.cell(row=row_idx, column=col_idx, value=value)

    # Auto-size columns
    for column in sheet.columns:
        column_letter = column[0].column_letter
        max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
        sheet.column_dimensions[column_letter].width = min(max_length + 2, 50)

    output = io.BytesIO()
    workbook.save(output)
    output.seek(0)
    return output.read()


__all__ = ['ROSTER_HEADERS', 'ROSTER_SHEET', 'export_team_roster', 'roster_filename']
