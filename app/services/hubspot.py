"""
HubSpot CRM Service
app/services/hubspot.py

Upserts the respondent as a HubSpot contact, attaches an assessment note
and opens a deal. Uses the CRM v3 objects API over httpx.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx

from app.core.exceptions import CRMSyncError

logger = logging.getLogger(__name__)

# HubSpot-defined association type ids
NOTE_TO_CONTACT = 202
DEAL_TO_CONTACT = 3


class HubSpotService:
    """Thin HubSpot CRM v3 client."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.hubapi.com",
        timeout: float = 10.0,
        deal_close_days: int = 30,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.deal_close_days = deal_close_days
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings) -> Optional["HubSpotService"]:
        if not settings.hubspot_enabled:
            return None
        return cls(
            api_key=settings.HUBSPOT_API_KEY.get_secret_value(),
            base_url=settings.HUBSPOT_BASE_URL,
            timeout=settings.HUBSPOT_TIMEOUT_SECONDS,
            deal_close_days=settings.HUBSPOT_DEAL_CLOSE_DAYS,
        )

    async def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            resp = await self.client.request(
                method, f"{self.base_url}{endpoint}", json=payload, headers=self._headers
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CRMSyncError(
                f"HubSpot API error: {e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise CRMSyncError(f"HubSpot request failed: {e}") from e
        return resp.json() if resp.content else {}

    async def search_contact_by_email(self, email: str) -> Optional[str]:
        """Contact id for the email, or None (search failures are non-fatal)."""
        payload = {
            "filterGroups": [
                {"filters": [{"propertyName": "email", "operator": "EQ", "value": email}]}
            ],
            "properties": ["email"],
        }
        try:
            data = await self._request("POST", "/crm/v3/objects/contacts/search", payload)
        except CRMSyncError as e:
            logger.warning("hubspot_contact_search_failed", extra={"error": e.message})
            return None
        results = data.get("results") or []
        return str(results[0]["id"]) if results else None

    async def create_or_update_contact(self, properties: Dict[str, Any]) -> str:
        """Upsert by email; returns the contact id."""
        clean = {k: str(v) for k, v in properties.items() if v not in (None, "")}
        existing_id = await self.search_contact_by_email(clean["email"])
        if existing_id:
            await self._request("PATCH", f"/crm/v3/objects/contacts/{existing_id}", {"properties": clean})
            return existing_id
        data = await self._request("POST", "/crm/v3/objects/contacts", {"properties": clean})
        return str(data["id"])

    async def create_note(self, contact_id: str, body: str) -> str:
        payload = {
            "properties": {
                "hs_timestamp": datetime.now(timezone.utc).isoformat(),
                "hs_note_body": body,
            },
            "associations": [_association(contact_id, NOTE_TO_CONTACT)],
        }
        data = await self._request("POST", "/crm/v3/objects/notes", payload)
        return str(data["id"])

    async def create_deal(self, contact_id: str, name: str, overall_score: int) -> str:
        close_date = datetime.now(timezone.utc) + timedelta(days=self.deal_close_days)
        payload = {
            "properties": {
                "dealname": name,
                "dealstage": "appointmentscheduled",
                "pipeline": "default",
                "amount": "0",
                "closedate": close_date.isoformat(),
                "lead_source": "LeadGen Assessment",
                "leadgen_assessment_score": str(overall_score),
            },
            "associations": [_association(contact_id, DEAL_TO_CONTACT)],
        }
        data = await self._request("POST", "/crm/v3/objects/deals", payload)
        return str(data["id"])

    async def sync_assessment(
        self,
        email: str,
        company: Optional[str],
        industry: Optional[str],
        company_size: Optional[str],
        overall_score: int,
        note_body: str,
    ) -> Dict[str, str]:
        """Contact upsert + note + deal. Returns the created ids."""
        contact_id = await self.create_or_update_contact(
            {
                "email": email,
                "company": company,
                "industry": industry,
                "leadgen_assessment_score": overall_score,
                "leadgen_assessment_date": datetime.now(timezone.utc).date().isoformat(),
                "leadgen_assessment_industry": industry,
                "leadgen_assessment_company_size": company_size,
            }
        )
        note_id = await self.create_note(contact_id, note_body)
        deal_id = await self.create_deal(
            contact_id, f"Lead Gen Assessment - {company or email}", overall_score
        )

        logger.info(
            "hubspot_synced",
            extra={"contact_id": contact_id, "note_id": note_id, "deal_id": deal_id},
        )
        return {"contact_id": contact_id, "note_id": note_id, "deal_id": deal_id}

    async def aclose(self) -> None:
        await self.client.aclose()


def _association(contact_id: str, type_id: int) -> Dict[str, Any]:
    return {
        "to": {"id": contact_id},
        "types": [{"associationCategory": "HUBSPOT_DEFINED", "associationTypeId": type_id}],
    }
