"""Declaration scanner package."""

from .scanner import Scanner as Scanner, scan_unit as scan_unit
from .declarations import MARKER_MODULE as MARKER_MODULE
