"""Maintenance commands for the Smart Road Block database.

Usage:
    roadblock-manage init-db
    roadblock-manage seed
    roadblock-manage create-user USERNAME PASSWORD
    roadblock-manage delete-user USERNAME
"""
import argparse
import logging
import sys
from datetime import date
from decimal import Decimal

from roadblock.config import get_settings
from roadblock.credentials import CredentialStore
from roadblock.database import build_engine, build_session_factory, init_db
from roadblock.errors import DuplicateUsername, NotFound
from roadblock.models import Driver, Payment, User, Vehicle

logger = logging.getLogger(__name__)

DEMO_USERNAME = 'test_user'
DEMO_PASSWORD = 'default@8901'


def seed(db) -> None:
    db.query(Payment).delete()
    db.query(Vehicle).delete()
    db.query(Driver).delete()
    db.query(User).delete()
    db.commit()

    CredentialStore(db).create(DEMO_USERNAME, DEMO_PASSWORD)

    john = Driver(
        full_name='John Moyo', license_number='472629HD', national_id='70-278724-G87',
        dob=date(1998, 4, 14), phone='+263779528194', defensive='0893714GT6',
        medical='EXP 02-10-2023', licence_class='2', licence_year='2018',
    )
    peter = Driver(
        full_name='Peter Dube', license_number='462729PB', national_id='70-278724-G87',
        dob=date(1998, 4, 14), phone='+263779528194', defensive='0893714GT6',
        medical='EXP 02-10-2023', licence_class='2', licence_year='2018',
    )
    db.add_all([
        Vehicle(plate_number='PBS492', make_and_model='Land Rover, Defender', year='2018',
                colour='White', weight=2000, net_weight=1500, fines_due=Decimal('123232.23'), driver=john),
        Vehicle(plate_number='PBS498', make_and_model='Toyota, Hilux', year='2016',
                colour='Silver', weight=1800, net_weight=1400, fines_due=Decimal('450.00'), driver=peter),
    ])
    db.commit()
    logger.info('Seeded demo data, sign in as %s', DEMO_USERNAME)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Smart Road Block maintenance commands")
    subparsers = parser.add_subparsers(dest='command', required=True)
    subparsers.add_parser('init-db', help='create missing tables')
    subparsers.add_parser('seed', help='wipe all records and load demo data')
    create_user = subparsers.add_parser('create-user', help='create a user account')
    create_user.add_argument('username')
    create_user.add_argument('password')
    delete_user = subparsers.add_parser('delete-user', help='delete a user account')
    delete_user.add_argument('username')
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    engine = build_engine(settings.DATABASE_URL)
    init_db(engine)
    if args.command == 'init-db':
        return 0

    with build_session_factory(engine)() as db:
        store = CredentialStore(db)
        try:
            if args.command == 'seed':
                seed(db)
            elif args.command == 'create-user':
                store.create(args.username, args.password)
            elif args.command == 'delete-user':
                store.delete_by_username(args.username)
        except (DuplicateUsername, NotFound) as exc:
            print(exc, file=sys.stderr)
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
