"""
Approval Kernel

Routes a pending invoice to the right approver and notification channel:
- Per-company workflow rules keyed on amount, department and manager flag
- Most-specific-rule-wins resolution with a stable tie-break
- Typed, coded failures and structured JSON logging
"""

__version__ = "0.1.0"
