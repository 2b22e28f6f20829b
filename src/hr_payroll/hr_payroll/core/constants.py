"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

OFFICE_START_HOUR = 9
OFFICE_END_HOUR = 17

MAX_BREAKS_PER_DAY = 4
ORPHAN_BREAK_MINUTES = 30

STANDARD_WORK_HOURS = 8
HALF_DAY_THRESHOLD_HOURS = 4

MS_PER_HOUR = 3_600_000

# Default payroll rates (fractions of basic salary) and fixed amounts.
HRA_RATE = 0.40
PF_EMPLOYER_RATE = 0.12
ESI_EMPLOYER_RATE = 0.0325
PF_EMPLOYEE_RATE = 0.12
ESI_EMPLOYEE_RATE = 0.0075
INCOME_TAX_RATE = 0.10
TRANSPORT_ALLOWANCE = 2000
MEDICAL_ALLOWANCE = 1500
PROFESSIONAL_TAX = 200

DEFAULT_CURRENCY = "INR"
DEFAULT_HISTORY_LIMIT = 12
RECENT_RECORDS_LIMIT = 10
