import logging
import sys

from app.services.maintenance_service import MaintenanceService

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    try:
        with MaintenanceService() as service:
            service.delete_all_transactions()
    except Exception as e:
        logger.error(f"Error deleting transactions: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
