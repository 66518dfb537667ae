"""
Reporting module: admin-only views over the guestbook.

Scope:
- Dashboard aggregates (totals, today, trailing week, daily series, latest entries)
- CSV exports: everything, newsletter subscribers (Mailchimp layout), date range

Everything here sits behind require_admin.
"""
