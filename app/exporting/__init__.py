from .xlsx import export_commission_workbook

__all__ = ["export_commission_workbook"]
