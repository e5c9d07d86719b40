"""School Attendance package.

This package is organized by feature modules (attendance, reports, roster, ...)
with a thin Flask controller layer over service/repository layers. Each
repository contract has a MySQL and a MongoDB implementation.
"""
