"""
Application initialization module
Handles initial setup tasks like creating the default tenant and super admin
"""

import logging

from sqlalchemy.orm import Session

from alumni.core.config import settings
from alumni.core.hasher import PasswordHelper
from alumni.models.tenant import Tenant
from alumni.models.user import User

logger = logging.getLogger(__name__)


def init_default_tenant(db: Session) -> Tenant:
    tenant = db.query(Tenant).filter(Tenant.name == settings.admin_default_tenant).first()
    if tenant:
        return tenant

    tenant = Tenant(name=settings.admin_default_tenant, is_active=True)
    db.add(tenant)
    db.commit()
    db.refresh(tenant)
    logger.info(f"Default tenant created (ID: {tenant.id}, Name: {tenant.name})")
    return tenant


def init_super_admin(db: Session, tenant: Tenant) -> None:
    """
    Initialize super admin user if it doesn't exist.

    Checks if any super admin exists in the database. If not, creates one
    using credentials from settings (config.py).
    """
    try:
        existing_admin = db.query(User).filter(User.role == "super_admin").first()

        if existing_admin:
            logger.info(
                f"Super admin already exists (ID: {existing_admin.id}, Email: {existing_admin.email})"
            )
            return

        super_admin = User(
            full_name=settings.admin_default_name,
            email=settings.admin_default_email.lower(),
            hashed_password=PasswordHelper.hash_password(settings.admin_default_password),
            role="super_admin",
            tenant_id=tenant.id,
            is_active=True,
        )

        db.add(super_admin)
        db.commit()
        db.refresh(super_admin)

        logger.info("=" * 60)
        logger.info("SUPER ADMIN CREATED")
        logger.info(f"Email: {settings.admin_default_email}")
        logger.info("=" * 60)
        logger.warning("Change the default super admin password immediately!")

    except Exception as e:
        logger.error(f"Failed to initialize super admin: {e}")
        db.rollback()
        raise


def initialize_application(db: Session) -> None:
    """
    Run all application initialization tasks.
    """
    logger.info("Starting application initialization...")

    tenant = init_default_tenant(db)
    init_super_admin(db, tenant)

    logger.info("Application initialization completed!")
