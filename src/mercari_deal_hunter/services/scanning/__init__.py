"""Scan cycle and periodic runner."""

from mercari_deal_hunter.services.scanning.scan_cycle import ScanCycle
from mercari_deal_hunter.services.scanning.scan_runner import ScanRunner

__all__ = ["ScanCycle", "ScanRunner"]
