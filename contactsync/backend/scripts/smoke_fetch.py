# scripts/smoke_fetch.py
import argparse
import asyncio
import json

from app.adapters.clients.user_profile import UserProfileClient
from app.domain.payloads import from_remote_json, to_normalized_remote_payload


async def main(external_id: str) -> None:
    client = UserProfileClient()
    doc = await client.get_user(external_id)
    contact = from_remote_json(doc)
    print(json.dumps(to_normalized_remote_payload(contact), indent=2))
    print("birthdate:", contact.birthdate, "| street:", contact.mailing_street, "| city:", contact.mailing_city)


if __name__ == "__main__":
    p = argparse.ArgumentParser(description="GET one remote user and show how it maps (no DB writes).")
    p.add_argument("external_id")
    asyncio.run(main(p.parse_args().external_id))
