"""Ranking sheet sources"""
from .sources import GoogleSheetsSource, SheetSourceError, load_rankings, read_sheet_file

__all__ = ['GoogleSheetsSource', 'SheetSourceError', 'load_rankings', 'read_sheet_file']
