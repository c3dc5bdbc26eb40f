"""School Vaccination System package.

This package is organized by feature modules (coordinators, students, drives,
reports) with a thin Flask controller layer over service/repository layers.
"""
