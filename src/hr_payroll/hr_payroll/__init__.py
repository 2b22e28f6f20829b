"""HR payroll package.

Organized by feature modules (attendance, payroll, employees, leaves, ...)
with a thin Flask controller layer over service/repository layers.
"""
