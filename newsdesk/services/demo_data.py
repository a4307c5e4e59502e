"""
Placeholder users for demo installations.

Only used by DashboardService when DEMO_MODE is on and no real user data was
found. Every id starts with "demo-" and the snapshot carries `demo: true`,
so these records cannot be mistaken for real accounts.
"""

from datetime import datetime, timedelta
from typing import List

from newsdesk.models.user import DashboardUser
from newsdesk.utils.timestamps import to_iso

# (display name, role, days since registration)
DEMO_USERS = (
    ("Mario Rossi", "Editor", 60),
    ("Laura Bianchi", "Contributor", 45),
    ("Giuseppe Verdi", "Reader", 30),
    ("Francesca Neri", "Contributor", 20),
    ("Alessandro Russo", "Reader", 15),
    ("Chiara Esposito", "Editor", 10),
    ("Marco Ferrari", "Reader", 5),
    ("Sofia Romano", "Reader", 3),
    ("Luca Marino", "Contributor", 2),
    ("Giulia Costa", "Reader", 1),
)


def demo_users(now: datetime) -> List[DashboardUser]:
    users = []
    for index, (name, role, days_ago) in enumerate(DEMO_USERS, start=1):
        users.append(
            DashboardUser(
                id=f"demo-{index}",
                display_name=name,
                email=f"{name.lower().replace(' ', '.')}@example.com",
                created_at=to_iso(now - timedelta(days=days_ago)),
                role=role,
            )
        )
    return users
