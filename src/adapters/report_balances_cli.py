"""CLI adapter printing source balances and ledger drift for one owner."""

from src.domain.errors import LedgerError
from src.infrastructure.container import build_ledger_service
from src.infrastructure.logging.logger import get_app_logger
from src.infrastructure.settings import LedgerSettings


def main() -> None:
    """Print balances for LEDGER_OWNER and exit non-zero on drift."""
    logger = get_app_logger()
    settings = LedgerSettings.from_env()
    if settings.owner is None:
        logger.warning("LEDGER_OWNER is required to report balances.")
        raise SystemExit(2)

    service = build_ledger_service(settings=settings)
    # Aggregate reads degrade to empty results, so check storage first.
    try:
        service.ping()
    except LedgerError as exc:
        logger.error(f"Ledger storage unavailable: {exc.message}")
        raise SystemExit(1) from exc

    balances = service.source_balances(settings.owner)
    drifts = service.ledger_check(settings.owner)

    print(f"Balances for {settings.owner} ({len(balances)} sources)")
    for row in balances:
        line = (
            f"{row.source_name} [{row.source_type.value}]: "
            f"{row.current_balance} {row.currency}"
        )
        if row.available_credit is not None:
            line += f", available credit={row.available_credit}"
        print(line)

    if drifts:
        for drift in drifts:
            print(
                f"DRIFT {drift.source_name}: stored={drift.current_balance}, "
                f"expected={drift.expected_balance}"
            )
        raise SystemExit(1)
    print("Ledger is consistent.")


if __name__ == "__main__":  # pragma: no cover
    main()
