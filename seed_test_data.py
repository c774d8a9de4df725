"""
Seed demo actions into the configured database.
Run:  python seed_test_data.py
"""
import sys

# ── bootstrap ────────────────────────────────────────────────────
from taskapp.infrastructure.db.session import init_db
from taskapp.infrastructure.db.models import ActionModel
from taskapp.infrastructure.notifications.center import get_notification_center

from taskapp.application.actions_usecases import CreateActionUseCase

factory = init_db()
db = factory()

existing = db.query(ActionModel).count()
if existing > 0:
    print(f"Database already has {existing} actions, nothing to do")
    sys.exit(0)

# Scheduled reminders live in the notification center of this process only;
# the app re-creates them from the rows at startup.
center = get_notification_center()
create = CreateActionUseCase(db, center)

# ═══════════════════════════════════════════════════════════════
# Perso
# ═══════════════════════════════════════════════════════════════
create.execute("Call the plumber", "perso")
create.execute("Water the plants", "perso", reminder_type="daily", reminder_time="19:30")
create.execute("Weekly groceries", "perso", reminder_type="weekly", reminder_time="10:00", reminder_weekday=6)
create.execute("Pay rent", "perso", reminder_type="monthly", reminder_time="09:00", reminder_monthday=1)

# ═══════════════════════════════════════════════════════════════
# Pro
# ═══════════════════════════════════════════════════════════════
create.execute("Prepare sprint review", "pro", reminder_type="weekly", reminder_time="08:30", reminder_weekday=5)
create.execute("Answer recruiter email", "pro")
create.execute("Update timesheet", "pro", reminder_type="daily", reminder_time="17:45")

# ═══════════════════════════════════════════════════════════════
# No list
# ═══════════════════════════════════════════════════════════════
create.execute("Read that article")
create.execute("Renew passport")

print(f"Seeded {db.query(ActionModel).count()} actions")
db.close()
