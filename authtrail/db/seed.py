"""Seed roles and the optional administrator account.

Runs on every startup and is idempotent:
- roles settings.admin_role and settings.default_role are created if missing
- when settings.admin_email and settings.admin_password are set, the admin
  account is created (e-mail confirmed) and given the admin role; an existing
  account only gets the role added if it lacks it
"""

import logging

from ..auth.models import User
from ..config import settings
from ..exceptions import AuthTrailError
from . import get_core

logger = logging.getLogger(__name__)


def seed_roles() -> None:
    with get_core(atomic=True) as core:
        for role in (settings.admin_role, settings.default_role):
            if core.users.ensure_role(role):
                logger.info("Role '%s' created", role)


def seed_admin_user() -> None:
    if not settings.admin_email or not settings.admin_password:
        logger.debug("No admin account configured, skipping seed")
        return

    try:
        with get_core(atomic=True) as core:
            admin = core.users.find_by_email(settings.admin_email)
            if admin is None:
                admin = User(settings.admin_email, settings.admin_name, email_confirmed=True)
                core.users.create(admin, settings.admin_password)
                core.users.assign_role(admin, settings.admin_role)
                logger.info("Admin account created: %s", settings.admin_email)
            elif not core.users.is_in_role(admin, settings.admin_role):
                core.users.assign_role(admin, settings.admin_role)
                logger.info("Role '%s' added to existing user: %s", settings.admin_role, settings.admin_email)
            else:
                logger.info("Admin account already exists: %s", settings.admin_email)
    except AuthTrailError as e:
        logger.error("Failed to seed admin account %s: %s", settings.admin_email, e.message)
        raise


def seed() -> None:
    seed_roles()
    seed_admin_user()
