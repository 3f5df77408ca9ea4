"""CRM record exercises — command-line runner.

Runs one exercise against DATABASE_URL and prints a JSON summary.

Usage:
  # Local in-memory run (creates the tables first)
  DATABASE_URL=sqlite+aiosqlite:// python run_exercises.py --create-schema basic-account

  # Upsert an account by name
  python run_exercises.py upsert-account --name "Acme Corporation"

  # Link contacts to accounts named after their last names
  python run_exercises.py link-contacts --last-name Smith --last-name Jones

  # Create opportunities under an account (created if missing)
  python run_exercises.py account-opportunities --account-name Acme --names "Deal A" "Deal B"
"""
import argparse
import asyncio
import logging
import os
import sys
from uuid import UUID

from db.connection import dispose_engine, get_db, init_schema
from db.models import Account, Contact, Opportunity
from db.store import SqlRecordStore
from exercises import accounts, cases, contacts, leads, opportunities
from schemas import ExerciseResult, RecordSummary

logger = logging.getLogger(__name__)


async def run_exercise(args: argparse.Namespace) -> ExerciseResult:
    """Run the exercise named by args.command inside one session."""
    result = ExerciseResult(exercise=args.command)
    logger.info("Running exercise %s", args.command)

    async with get_db() as session:
        store = SqlRecordStore(session)

        if args.command == "basic-account":
            result.record_id = await accounts.create_basic_account(store)

        elif args.command == "named-account":
            await accounts.create_named_account(store, args.name, args.industry)
            result.records = await _summaries(store, Account, Account.name == args.name)

        elif args.command == "update-account":
            await accounts.update_account_fields(store, args.account_id, args.name, args.industry)
            result.records = await _summaries(store, Account, Account.id == args.account_id)

        elif args.command == "upsert-account":
            account = await accounts.upsert_account_by_name(store, args.name)
            result.record_id = account.id
            result.records = [RecordSummary.from_record(account)]

        elif args.command == "linked-contact":
            result.record_id = await contacts.create_linked_contact(store, args.account_id)

        elif args.command == "rename-contact":
            await contacts.rename_contact(store, args.contact_id, args.last_name)
            result.records = await _summaries(store, Contact, Contact.id == args.contact_id)

        elif args.command == "link-contacts":
            batch = [Contact(last_name=name) for name in args.last_name]
            await contacts.link_contacts_to_accounts(store, batch)
            result.records = [RecordSummary.from_record(c) for c in batch]

        elif args.command == "restage":
            await opportunities.restage_opportunity(store, args.opportunity_id, args.stage)
            result.records = await _summaries(
                store, Opportunity, Opportunity.id == args.opportunity_id
            )

        elif args.command == "normalize":
            batch = await store.read(Opportunity, Opportunity.id.in_(args.opportunity_id))
            await opportunities.normalize_opportunities(store, batch)
            result.records = [RecordSummary.from_record(o) for o in batch]
            result.message = f"{len(batch)} of {len(args.opportunity_id)} opportunities found"

        elif args.command == "account-opportunities":
            await opportunities.create_opportunities_for_account(
                store, args.account_name, args.names
            )
            account = (await store.read(Account, Account.name == args.account_name))[0]
            result.record_id = account.id
            result.records = await _summaries(
                store, Opportunity, Opportunity.account_id == account.id
            )

        elif args.command == "leads":
            await leads.create_and_delete_leads(store, args.names)
            result.message = f"{len(args.names)} lead(s) created and deleted"

        elif args.command == "cases":
            await cases.create_and_delete_cases(store, args.account_id, args.count)
            result.message = f"{max(args.count, 0)} case(s) created and deleted"

    return result


async def _summaries(store: SqlRecordStore, model, *criteria) -> list[RecordSummary]:
    return [RecordSummary.from_record(r) for r in await store.read(model, *criteria)]


async def main(args: argparse.Namespace) -> ExerciseResult:
    try:
        if args.create_schema:
            await init_schema()
        return await run_exercise(args)
    finally:
        await dispose_engine()


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CRM record manipulation exercises")
    parser.add_argument(
        "--create-schema",
        action="store_true",
        default=False,
        help="Create missing tables before running (SQLite / local databases)",
    )
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("basic-account", help="Insert a fixed account and print its id")

    named = sub.add_parser("named-account", help="Insert an account with a name and industry")
    named.add_argument("--name", required=True)
    named.add_argument("--industry", required=True)

    update = sub.add_parser("update-account", help="Change an account's name and industry")
    update.add_argument("--account-id", required=True, type=UUID)
    update.add_argument("--name", required=True)
    update.add_argument("--industry", required=True)

    upsert = sub.add_parser("upsert-account", help="Update or create an account by name")
    upsert.add_argument("--name", required=True)

    linked = sub.add_parser("linked-contact", help="Insert a fixed contact under an account")
    linked.add_argument("--account-id", required=True, type=UUID)

    rename = sub.add_parser("rename-contact", help="Change a contact's last name")
    rename.add_argument("--contact-id", required=True, type=UUID)
    rename.add_argument("--last-name", required=True)

    link = sub.add_parser("link-contacts", help="Link new contacts to accounts by last name")
    link.add_argument(
        "--last-name", action="append", required=True, help="Repeat for each contact"
    )

    restage = sub.add_parser("restage", help="Move an opportunity to a new stage")
    restage.add_argument("--opportunity-id", required=True, type=UUID)
    restage.add_argument("--stage", required=True)

    normalize = sub.add_parser("normalize", help="Normalize stage, amount and close date")
    normalize.add_argument("--opportunity-id", action="append", required=True, type=UUID)

    account_opps = sub.add_parser(
        "account-opportunities", help="Create opportunities under a named account"
    )
    account_opps.add_argument("--account-name", required=True)
    account_opps.add_argument("--names", nargs="+", required=True)

    lead_cmd = sub.add_parser("leads", help="Insert then delete one lead per name")
    lead_cmd.add_argument("--names", nargs="*", default=[])

    case_cmd = sub.add_parser("cases", help="Insert then delete cases under an account")
    case_cmd.add_argument("--account-id", required=True, type=UUID)
    case_cmd.add_argument("--count", type=int, default=1)

    return parser


if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(name)s %(message)s",
    )
    parser = _build_arg_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    outcome = asyncio.run(main(args))
    print(outcome.model_dump_json(indent=2))
