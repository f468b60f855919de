"""School attendance package.

Organized by feature modules (students, attendance, reports) with a thin Flask
controller layer on top of service and repository layers.
"""
