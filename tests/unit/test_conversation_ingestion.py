from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from models import Company, ConversationMessage, ConversationProductCitation, Product
from models.schemas import ConversationWebhookMessage
from services.catalog_provider import SqlProductCatalogProvider
from services.citation_links import CitationLinkWriter, link_mentioned_products
from services.conversation_ingestion import (
    ingest_conversation_messages,
    normalize_phone,
    normalize_webhook_message,
    parse_datetime,
)
from services.product_matching import Mention, MentionMethod


def _message(**fields) -> ConversationWebhookMessage:
    return ConversationWebhookMessage.model_validate(fields)


class TestWebhookNormalization:

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("(11) 98765-4321", "5511987654321"),
            ("1132654321", "551132654321"),
            ("+55 11 98765-4321", "5511987654321"),
            ("987654321", "987654321"),
            ("", ""),
            (None, ""),
        ],
    )
    def test_normalize_phone(self, raw, expected):
        assert normalize_phone(raw) == expected

    def test_parse_datetime(self):
        assert parse_datetime("2026-01-05T10:00:00Z") == datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
        assert parse_datetime("not a date") is None
        assert parse_datetime("   ") is None

    def test_parse_datetime_converts_offsets_to_utc(self):
        parsed = parse_datetime("2026-01-31T23:00:00-03:00")

        assert parsed.utcoffset() == timedelta(0)
        assert parsed.replace(tzinfo=None) == datetime(2026, 2, 1, 2, 0)

    def test_parse_datetime_keeps_naive_values(self):
        assert parse_datetime("2026-01-05T10:00:00") == datetime(2026, 1, 5, 10, 0)

    def test_camel_and_snake_case_keys(self):
        camel = _message(companyId=" c1 ", vendedorTelefone="11987654321", mensagem="  oi  ")
        snake = _message(company_id="c1", vendedor_telefone="11987654321", mensagem="oi")

        assert normalize_webhook_message(camel) == normalize_webhook_message(snake)
        normalized = normalize_webhook_message(camel)
        assert normalized.company_id == "c1"
        assert normalized.seller_phone == "5511987654321"
        assert normalized.message_text == "oi"

    def test_blank_fields_become_none(self):
        normalized = normalize_webhook_message(_message(mensagem="   ", resposta="", vendedorTelefone="--"))
        assert normalized.message_text is None
        assert normalized.response_text is None
        assert normalized.seller_phone is None


class TestCatalogProvider:

    def test_lists_live_products_of_company(self, db_session: Session, catalog):
        catalog["farofa"].deleted_at = datetime(2026, 1, 1)
        db_session.add(Product(id="other", company_id="company-2", name="Molho Especial"))
        db_session.flush()

        products = SqlProductCatalogProvider(db_session).list_products("company-1")

        assert {p.id for p in products} == {"prod-molho", "prod-tempero"}
        molho = next(p for p in products if p.id == "prod-molho")
        assert molho.sku_code == "A-002"


class TestCitationLinkWriter:

    def _stored_message(self, db_session: Session) -> ConversationMessage:
        message = ConversationMessage(company_id="company-1", message_text="A-002")
        db_session.add(message)
        db_session.flush()
        return message

    def test_duplicate_links_are_skipped(self, db_session: Session, catalog):
        message = self._stored_message(db_session)
        writer = CitationLinkWriter(db_session)
        cited_at = datetime(2026, 1, 5, 10, 0)

        first = writer.create(message.id, "prod-molho", "company-1", cited_at, "auto_text_v1:code_exact:1.00")
        second = writer.create(message.id, "prod-molho", "company-1", cited_at, "auto_text_v1:code_exact:1.00")

        assert (first, second) == (1, 0)
        assert db_session.query(ConversationProductCitation).count() == 1

    def test_unknown_product_is_raised_not_skipped(self, committing_session: Session):
        message = ConversationMessage(company_id="company-1", message_text="A-002")
        committing_session.add(message)
        committing_session.commit()
        writer = CitationLinkWriter(committing_session)

        with pytest.raises(IntegrityError):
            writer.create(message.id, "no-such-product", "company-1", datetime(2026, 1, 5), "auto_text_v1:code_exact:1.00")

        assert committing_session.query(ConversationProductCitation).count() == 0

    def test_link_mentioned_products_formats_source(self, db_session: Session, catalog):
        message = self._stored_message(db_session)
        mentions = [
            Mention("prod-molho", MentionMethod.CODE_EXACT, 1.0),
            Mention("prod-tempero", MentionMethod.NAME_FUZZY, 0.9123),
        ]

        inserted = link_mentioned_products(
            CitationLinkWriter(db_session), message.id, mentions, "company-1", datetime(2026, 1, 5), "n8n"
        )

        assert inserted == 2
        sources = {c.product_id: c.source for c in db_session.query(ConversationProductCitation).all()}
        assert sources == {
            "prod-molho": "n8n:code_exact:1.00",
            "prod-tempero": "n8n:name_fuzzy:0.91",
        }


class TestIngestion:

    def test_code_mention_is_linked(self, db_session: Session, catalog):
        result = ingest_conversation_messages(db_session, [
            _message(companyId="company-1", mensagem="Quanto custa o A-002?", timestampIso="2026-01-05T10:00:00Z"),
        ])

        assert (result.inserted, result.linked_products) == (1, 1)
        citation = db_session.query(ConversationProductCitation).one()
        assert citation.product_id == "prod-molho"
        assert citation.company_id == "company-1"
        assert citation.source == "auto_text_v1:code_exact:1.00"
        assert citation.cited_at.replace(tzinfo=None) == datetime(2026, 1, 5, 10, 0)

    def test_cited_at_is_stored_in_utc(self, db_session: Session, catalog):
        ingest_conversation_messages(db_session, [
            _message(companyId="company-1", mensagem="Quanto custa o A-002?", timestampIso="2026-01-31T23:00:00-03:00"),
        ])

        citation = db_session.query(ConversationProductCitation).one()
        assert citation.cited_at.replace(tzinfo=None) == datetime(2026, 2, 1, 2, 0)

    def test_message_source_is_used_as_prefix(self, db_session: Session, catalog):
        ingest_conversation_messages(db_session, [
            _message(company_id="company-1", resposta="temos tempero baiano picante", source="n8n"),
        ])
        citation = db_session.query(ConversationProductCitation).one()
        assert citation.source == "n8n:name_exact:0.97"

    def test_message_without_company_is_stored_without_links(self, db_session: Session, catalog):
        result = ingest_conversation_messages(db_session, [_message(mensagem="Quanto custa o A-002?")])

        assert (result.inserted, result.linked_products) == (1, 0)
        assert db_session.query(ConversationMessage).count() == 1
        assert db_session.query(ConversationProductCitation).count() == 0

    def test_catalog_is_loaded_once_per_batch(self, db_session: Session, catalog, monkeypatch):
        calls = []
        original = SqlProductCatalogProvider.list_products

        def counting(self, company_id):
            calls.append(company_id)
            return original(self, company_id)

        monkeypatch.setattr(SqlProductCatalogProvider, "list_products", counting)

        result = ingest_conversation_messages(db_session, [
            _message(companyId="company-1", mensagem="Quanto custa o A-002?"),
            _message(companyId="company-1", mensagem="tem tempero baiano picante?"),
            _message(companyId="company-1", mensagem="e a farofa pronta temperada?"),
        ])

        assert calls == ["company-1"]
        assert (result.inserted, result.linked_products) == (3, 3)

    def test_stored_message_fields(self, db_session: Session, company):
        ingest_conversation_messages(db_session, [
            _message(
                companyId="company-1",
                senderId="5511999990000",
                vendedorNome=" Ana ",
                vendedorTelefone="(11) 98765-4321",
                clienteNome="Mercado Central",
                flowName="atendimento",
                mensagem="bom dia",
            ),
        ])
        record = db_session.query(ConversationMessage).one()
        assert record.seller_name == "Ana"
        assert record.seller_phone == "5511987654321"
        assert record.client_name == "Mercado Central"
        assert record.flow_name == "atendimento"
        assert record.sender_id == "5511999990000"


class TestLinkFailures:

    @pytest.fixture
    def seeded_session(self, committing_session: Session) -> Session:
        committing_session.add(Company(id="company-1", name="Casa do Molho"))
        committing_session.add_all([
            Product(id="prod-molho", company_id="company-1", name="Produto A - Molho Especial", sku_code="A-002"),
            Product(id="prod-tempero", company_id="company-1", name="Tempero Baiano Picante"),
        ])
        committing_session.commit()
        return committing_session

    def test_failed_links_keep_message_and_continue(self, seeded_session: Session, monkeypatch):
        calls = []
        original = CitationLinkWriter.create

        def failing_first(self, *args, **kwargs):
            calls.append(args[1])
            if len(calls) == 1:
                raise OperationalError("INSERT INTO conversation_product_citations", {}, Exception("database is locked"))
            return original(self, *args, **kwargs)

        monkeypatch.setattr(CitationLinkWriter, "create", failing_first)

        result = ingest_conversation_messages(seeded_session, [
            _message(companyId="company-1", mensagem="Quanto custa o A-002?"),
            _message(companyId="company-1", mensagem="tem tempero baiano picante?"),
        ])

        assert (result.inserted, result.linked_products) == (2, 1)
        assert calls == ["prod-molho", "prod-tempero"]
        assert seeded_session.query(ConversationMessage).count() == 2
        citation = seeded_session.query(ConversationProductCitation).one()
        assert citation.product_id == "prod-tempero"

    def test_unknown_company_messages_are_stored(self, seeded_session: Session):
        result = ingest_conversation_messages(seeded_session, [
            _message(companyId="company-9", mensagem="Quanto custa o A-002?"),
        ])

        assert (result.inserted, result.linked_products) == (1, 0)
        assert seeded_session.query(ConversationMessage).one().company_id == "company-9"
