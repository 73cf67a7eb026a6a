from .table_workbook import build_table_workbook

__all__ = ['build_table_workbook']
