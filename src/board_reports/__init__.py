"""board-member-reports — Split an overview workbook into per-member receivable reports."""

__version__ = "0.2.0"

SPONSORSHIP = "sponsorship"
PROGRAM_QUOTA = "program_quota"
TICKET_QUOTA = "ticket_quota"

TABLE_KEYS: list[str] = [SPONSORSHIP, PROGRAM_QUOTA, TICKET_QUOTA]
