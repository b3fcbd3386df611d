"""Exporters for league analyses"""
from .csv_exporter import CSVExporter

__all__ = ['CSVExporter']
