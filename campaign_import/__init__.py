"""Spreadsheet import & validation pipeline for wards, polling booths and constituencies."""

__version__ = "0.1.0"
