"""
Seed the local database with sample machines, clients, locations and services,
and optionally give an existing profile a role.

Usage:
  python scripts/seed_dev_data.py
  python scripts/seed_dev_data.py --role SUPER_ADMIN --email me@example.com

This script is idempotent: running it multiple times will upsert the same
records based on their natural keys (internal_id for machines, name otherwise).
"""

import argparse
import os
import sys
from datetime import datetime

# Add parent directory to path to import agrox modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from agrox.db import Base, engine, session_scope
from agrox.models.models import Machine, Client, Location, Service, User, UserRole
from agrox.services.permissions import ROLES


MACHINES = [
    {"internal_id": "T-01", "brand": "John Deere", "name": "Trator", "model": "6120M", "plate": "AA-01-BB"},
    {"internal_id": "T-02", "brand": "New Holland", "name": "Trator", "model": "T6.175", "plate": "AA-02-BB"},
    {"internal_id": "C-01", "brand": "Claas", "name": "Ceifeira", "model": "Lexion 760"},
    {"internal_id": "P-01", "brand": "Hardi", "name": "Pulverizador", "model": "Navigator", "status": "MAINTENANCE"},
]

CLIENTS = {
    "Herdade do Monte": ["Parcela Norte", "Parcela Sul"],
    "Quinta do Vale": ["Vinha Velha", "Olival"],
}

SERVICES = ["Lavoura", "Sementeira", "Colheita", "Pulverização"]


def ensure_machine(session, data: dict) -> Machine:
    machine = session.query(Machine).filter(Machine.internal_id == data["internal_id"]).first()
    if machine is None:
        machine = Machine(**data)
        session.add(machine)
    else:
        for key, value in data.items():
            setattr(machine, key, value)
        machine.updated_at = datetime.utcnow()
    return machine


def ensure_client(session, name: str, locations: list) -> Client:
    client = session.query(Client).filter(Client.name == name).first()
    if client is None:
        client = Client(name=name)
        session.add(client)
        session.flush()
    for loc_name in locations:
        exists = session.query(Location).filter(Location.client_id == client.id, Location.name == loc_name).first()
        if exists is None:
            session.add(Location(client_id=client.id, name=loc_name))
    return client


def ensure_service(session, name: str) -> Service:
    service = session.query(Service).filter(Service.name == name).first()
    if service is None:
        service = Service(name=name)
        session.add(service)
    return service


def grant_role(session, email: str, role: str) -> bool:
    user = session.query(User).filter(User.email == email.strip().lower()).first()
    if user is None:
        print(f"[SKIP] No profile for {email}; log in once so the row exists")
        return False
    session.query(UserRole).filter(UserRole.user_id == user.id).delete(synchronize_session=False)
    session.add(UserRole(user_id=user.id, role=role))
    return True


def main():
    parser = argparse.ArgumentParser(description="Seed development data")
    parser.add_argument("--email", help="profile email to grant a role to")
    parser.add_argument("--role", choices=ROLES, default="SUPER_ADMIN")
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    with session_scope() as session:
        for data in MACHINES:
            ensure_machine(session, data)
        for name, locations in CLIENTS.items():
            ensure_client(session, name, locations)
        for name in SERVICES:
            ensure_service(session, name)
        if args.email and grant_role(session, args.email, args.role):
            print(f"[OK] {args.email} is now {args.role}")
    print(f"[OK] {len(MACHINES)} machines, {len(CLIENTS)} clients, {len(SERVICES)} services")


if __name__ == "__main__":
    main()
