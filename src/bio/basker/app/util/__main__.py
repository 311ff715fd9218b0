import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

import aiohttp

from bio.basker.atproto.pds import normalize_handle, resolve_handle

logger = logging.getLogger(__name__)


class AdminCheckError(ValueError):
    pass


def validate_admin(did: str, handle: str) -> None:
    if not did or not handle:
        raise AdminCheckError("Both DID and handle are required")
    if not did.startswith("did:"):
        raise AdminCheckError('DID must start with "did:"')
    if "." not in handle:
        raise AdminCheckError('Handle must be a domain name, e.g. "name.bsky.social"')


def admin_dids_with(did: str, current: Optional[str]) -> List[str]:
    """Return the ADMIN_DIDS list with did appended, keeping the existing order."""
    admin_dids = [d.strip() for d in (current or "").split(",") if d.strip()]
    if did in admin_dids:
        logger.warning("%s is already in the admin list", did)
        return admin_dids
    admin_dids.append(did)
    return admin_dids


async def checkAdmin(did: str, handle: str) -> None:
    validate_admin(did, normalize_handle(handle))
    admin_dids = admin_dids_with(did, os.getenv("ADMIN_DIDS"))
    print(f"ADMIN_DIDS={','.join(admin_dids)}")


async def resolveHandle(pds_url: str, handle: str) -> None:
    async with aiohttp.ClientSession() as http_session:
        did = await resolve_handle(http_session, pds_url, normalize_handle(handle))
        print(f"{handle} {did}")


async def realMain() -> None:
    parser = argparse.ArgumentParser(prog="basker-util", description="Basker utilities")

    parser.add_argument(
        "--pds-url",
        default="https://bsky.social",
        help="The PDS used to resolve handles.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_admin = subparsers.add_parser(
        "check-admin", help="Validate a new admin and print the ADMIN_DIDS setting"
    )
    check_admin.add_argument("did", help="The DID to grant admin capability to.")
    check_admin.add_argument("handle", help="The handle belonging to the DID.")

    resolve = subparsers.add_parser("resolve", help="Resolve a handle to a DID")
    resolve.add_argument("handle", help="The handle to resolve.")

    args = vars(parser.parse_args())
    command = args.get("command", None)

    try:
        if command == "check-admin":
            await checkAdmin(args["did"], args["handle"])
        elif command == "resolve":
            await resolveHandle(args["pds_url"], args["handle"])
    except AdminCheckError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main() -> None:
    logging.basicConfig()
    asyncio.run(realMain())


if __name__ == "__main__":
    main()
