"""Tests for request payload normalization and validation."""

import uuid

import pytest

from leadintel.models.enums import InteractionType, LeadStatus
from leadintel.schemas.lead import AssignRequest, BatchAnalyzeRequest, InteractionCreate, StatusUpdateRequest
from leadintel.schemas.webhook import ContactFormPayload


class TestContactFormPayload:
    def test_minimal_payload(self):
        payload = ContactFormPayload(name="João Silva", email="joao@example.com", message="Olá")
        assert payload.name == "João Silva"
        assert payload.source == "contact_form"
        assert payload.whatsapp is None
        assert payload.phone is None

    def test_full_payload(self):
        payload = ContactFormPayload(
            name="Maria Souza",
            email="maria@oficina.com.br",
            company="Oficina Souza",
            whatsapp="(21) 99999-8888",
            phone="21 3333-4444",
            city="Rio de Janeiro",
            state="RJ",
            country="Brasil",
            business_type="oficina",
            message="Preciso de um scanner diesel",
            source="booking",
        )
        assert payload.whatsapp == "(21) 99999-8888"
        assert payload.source == "booking"

    def test_name_required(self):
        with pytest.raises(Exception):
            ContactFormPayload(email="test@test.com", message="Oi")

    def test_message_required(self):
        with pytest.raises(Exception):
            ContactFormPayload(name="Test", email="test@test.com")

    def test_message_max_length(self):
        with pytest.raises(Exception):
            ContactFormPayload(name="Test", email="test@test.com", message="x" * 10001)


class TestPipelineRequests:
    def test_status_update_keeps_raw_status(self):
        req = StatusUpdateRequest(new_status="negotiation", reason="Pediu desconto")
        assert req.new_status == LeadStatus.NEGOTIATION.value
        assert StatusUpdateRequest(new_status="archived").new_status == "archived"

    def test_status_update_rejects_blank_and_oversized(self):
        with pytest.raises(Exception):
            StatusUpdateRequest(new_status="")
        with pytest.raises(Exception):
            StatusUpdateRequest(new_status="x" * 51)

    def test_assign_requires_uuid(self):
        with pytest.raises(Exception):
            AssignRequest(user_id="not-a-uuid")
        user_id = uuid.uuid4()
        assert AssignRequest(user_id=str(user_id)).user_id == user_id

    def test_interaction_type(self):
        req = InteractionCreate(type="whatsapp", content="Mandei o catálogo")
        assert req.type is InteractionType.WHATSAPP

    def test_interaction_rejects_unknown_type(self):
        with pytest.raises(Exception):
            InteractionCreate(type="fax", content="...")

    def test_batch_needs_at_least_one_lead(self):
        with pytest.raises(Exception):
            BatchAnalyzeRequest(lead_ids=[])
