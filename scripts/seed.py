#!/usr/bin/env python3
"""Seed the database with the admin user and a few geo-enriched sample leads."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from sqlalchemy import select

from leadintel.config import settings
from leadintel.database import Base, engine, get_sync_session
from leadintel.geo import get_geo_resolver
from leadintel.models import Lead, User

SAMPLE_LEADS = [
    {
        "name": "Carlos Mendes",
        "email": "carlos@autocenter-mendes.com.br",
        "company": "Auto Center Mendes",
        "whatsapp": "(11) 98765-4321",
        "business_type": "oficina",
        "message": "Quero conhecer os scanners para a minha oficina.",
    },
    {
        "name": "Fernanda Lima",
        "email": "fernanda@diesel-sul.com.br",
        "company": "Diesel Sul",
        "phone": "51 3333-2222",
        "business_type": "frota",
        "message": "Temos 40 caminhões e procuramos diagnóstico embarcado.",
    },
    {
        "name": "João Pereira",
        "email": "joao@example.pt",
        "company": "Oficina Pereira",
        "whatsapp": "+351 912 345 678",
        "business_type": "oficina",
        "message": "Vocês enviam para Portugal?",
    },
]


def seed():
    Base.metadata.create_all(engine)
    session = get_sync_session()
    resolver = get_geo_resolver()

    try:
        admin = session.execute(select(User).where(User.email == settings.admin_email)).scalar_one_or_none()
        if admin:
            print(f"Admin user already exists: {admin.id}")
        else:
            admin = User(name="Admin", email=settings.admin_email, role="admin")
            session.add(admin)
            print(f"Created admin user: {settings.admin_email}")

        for data in SAMPLE_LEADS:
            exists = session.execute(select(Lead.id).where(Lead.email == data["email"])).first()
            if exists:
                continue
            lead = Lead(**data, status="new")
            profile = resolver.resolve(lead.contact_phone)
            lead.geo_data = profile.model_dump(exclude_none=True)
            for column, value in profile.to_lead_fields().items():
                setattr(lead, column, value)
            session.add(lead)
            print(f"Created lead: {data['name']} ({profile.state_code or profile.country or 'unknown location'})")

        session.commit()
    finally:
        session.close()


if __name__ == "__main__":
    seed()
