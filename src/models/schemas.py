from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def _alias(snake: str, camel: str):
    return Field(default=None, validation_alias=AliasChoices(snake, camel))


class ConversationWebhookMessage(BaseModel):
    """One chat message as posted by the conversation webhook.

    Both snake_case and camelCase keys are accepted; unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    timestamp_iso: Optional[str] = _alias("timestamp_iso", "timestampIso")
    sender_id: Optional[str] = _alias("sender_id", "senderId")
    data: Optional[str] = None
    msg_type: Optional[str] = _alias("msg_type", "msgType")
    flow_name: Optional[str] = _alias("flow_name", "flowName")
    execution_id: Optional[str] = _alias("execution_id", "executionId")
    message_id: Optional[str] = _alias("message_id", "messageId")
    mensagem: Optional[str] = None
    resposta: Optional[str] = None
    vendedor_nome: Optional[str] = _alias("vendedor_nome", "vendedorNome")
    vendedor_telefone: Optional[str] = _alias("vendedor_telefone", "vendedorTelefone")
    supervisor: Optional[str] = None
    cliente_nome: Optional[str] = _alias("cliente_nome", "clienteNome")
    leads_encontrados: Optional[str] = _alias("leads_encontrados", "leadsEncontrados")
    company_id: Optional[str] = _alias("company_id", "companyId")
    source: Optional[str] = None


class ConversationWebhookBatch(BaseModel):
    model_config = ConfigDict(extra="ignore")

    mensagens: Optional[List[ConversationWebhookMessage]] = None
    messages: Optional[List[ConversationWebhookMessage]] = None

    def all_messages(self) -> List[ConversationWebhookMessage]:
        return self.mensagens or self.messages or []


class IngestionSummary(BaseModel):
    inserted: int
    linked_products: int


class IngestionResponse(BaseModel):
    data: IngestionSummary


class MentionDetectRequest(BaseModel):
    message_text: Optional[str] = None
    response_text: Optional[str] = None
    company_id: Optional[str] = None
    source_prefix: Optional[str] = None


class MentionItem(BaseModel):
    product_id: str
    method: str
    score: float
    source: str


class MentionDetectResponse(BaseModel):
    mentions: List[MentionItem]


class ProductCitationItem(BaseModel):
    product_id: str
    product_name: str
    citations: int


class ProductCitationRankingResponse(BaseModel):
    company_id: Optional[str]
    most_cited: List[ProductCitationItem]
    least_cited: List[ProductCitationItem]
