"""Validation guards applied to an account before its password is checked."""
from agricart.domain.account import Account
from agricart.domain.enums import Portal
from agricart.domain.errors import AccountDeactivated, WrongPortal


def validate_account_active(account: Account, portal: Portal) -> None:
    """Raises if the account has been deactivated by an administrator."""
    if not account.active:
        raise AccountDeactivated(field=portal.identifier_field)


def validate_portal_access(account: Account, portal: Portal) -> None:
    """Raises if the account's user type cannot sign in through *portal*."""
    if not portal.admits(account.user_type):
        raise WrongPortal(
            actual_type=account.user_type,
            target_portal=portal,
            field=portal.identifier_field,
        )
