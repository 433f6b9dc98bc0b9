"""Staff meal tracker package.

This package is organized by feature modules (schedule, credits, meals, users,
qr, security, scan, admin) with a thin Flask controller layer and
service/repository layers underneath.
"""
