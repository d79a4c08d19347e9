"""QR Attendance package.

Feature modules (users, attendance, qr, reports, notifications) with a thin
Flask controller layer on top of service/repository layers.
"""
