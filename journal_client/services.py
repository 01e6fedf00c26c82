"""Service layer: typed wrappers over the journal API surface."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from journal_client.gateway import HttpGateway
from journal_client.models import (
    AccountUpdateRequest,
    AuthResponse,
    ChangePasswordRequest,
    CheckoutSession,
    CreateFolderRequest,
    CreateNoteRequest,
    DashboardMetrics,
    Entity,
    EntityCreateRequest,
    EntityTimeline,
    EntityType,
    EntityUpdateRequest,
    Folder,
    LoginRequest,
    MoveNoteRequest,
    NoteIndex,
    NoteResponse,
    RegisterRequest,
    Subscription,
    TrackingEvent,
    TrackingStats,
    TrackRequest,
    UpdateNoteRequest,
    User,
)


def _type_param(entity_type: Optional[EntityType]) -> Optional[str]:
    if entity_type is None:
        return None
    return entity_type.value if isinstance(entity_type, EntityType) else str(entity_type)


class _ApiService:
    def __init__(self, gateway: HttpGateway):
        self.gateway = gateway


class AuthService(_ApiService):
    """Login, registration and profile lookups."""

    async def login(self, email: str, password: str) -> AuthResponse:
        body = LoginRequest(email=email, password=password).to_wire()
        data = await self.gateway.post("/auth/login", json=body, authenticate=False)
        return AuthResponse.model_validate(data)

    async def register(self, username: str, email: str, password: str) -> AuthResponse:
        body = RegisterRequest(username=username, email=email, password=password).to_wire()
        data = await self.gateway.post("/auth/register", json=body, authenticate=False)
        return AuthResponse.model_validate(data)

    async def google_callback(self, id_token: str) -> AuthResponse:
        data = await self.gateway.post("/auth/google/callback", json={"idToken": id_token}, authenticate=False)
        return AuthResponse.model_validate(data)

    async def verify_email(self, token: str) -> None:
        await self.gateway.get("/auth/verify", params={"token": token}, authenticate=False)

    async def me(self, token: Optional[str] = None) -> User:
        """Fetch the current profile, optionally with an explicit credential."""
        headers = {"Authorization": f"Bearer {token}"} if token else None
        data = await self.gateway.get("/auth/me", headers=headers)
        return User.model_validate(data)


class NoteService(_ApiService):
    async def create(self, content: str, folder_id: Optional[str] = None) -> NoteResponse:
        body = CreateNoteRequest(content=content, folder_id=folder_id).to_wire()
        return NoteResponse.model_validate(await self.gateway.post("/api/notes", json=body))

    async def update(self, note_id: str, content: str) -> NoteResponse:
        body = UpdateNoteRequest(content=content).to_wire()
        return NoteResponse.model_validate(await self.gateway.put(f"/api/notes/{note_id}", json=body))

    async def archive(self, note_id: str) -> None:
        await self.gateway.delete(f"/api/notes/{note_id}")

    async def get(self, note_id: str) -> NoteResponse:
        return NoteResponse.model_validate(await self.gateway.get(f"/api/notes/{note_id}"))

    async def list(
        self,
        folder_id: Optional[str] = None,
        root_only: Optional[bool] = None,
        days: Optional[int] = None,
    ) -> List[NoteIndex]:
        params = {"folderId": folder_id, "rootOnly": root_only, "days": days}
        data = await self.gateway.get("/api/notes", params=params)
        return [NoteIndex.model_validate(item) for item in data or []]

    async def recent(self) -> List[NoteIndex]:
        data = await self.gateway.get("/api/notes/recent")
        return [NoteIndex.model_validate(item) for item in data or []]

    async def move(self, note_id: str, folder_id: Optional[str]) -> None:
        body = MoveNoteRequest(folder_id=folder_id).to_wire()
        await self.gateway.patch(f"/api/notes/{note_id}/move", json=body)


class EntityService(_ApiService):
    async def create(self, request: EntityCreateRequest) -> Entity:
        return Entity.model_validate(await self.gateway.post("/api/entities", json=request.to_wire()))

    async def update(self, entity_id: str, request: EntityUpdateRequest) -> Entity:
        data = await self.gateway.put(f"/api/entities/{entity_id}", json=request.to_wire())
        return Entity.model_validate(data)

    async def archive(self, entity_id: str) -> None:
        await self.gateway.delete(f"/api/entities/{entity_id}")

    async def get(self, entity_id: str) -> Entity:
        return Entity.model_validate(await self.gateway.get(f"/api/entities/{entity_id}"))

    async def list(self, entity_type: Optional[EntityType] = None) -> List[Entity]:
        data = await self.gateway.get("/api/entities", params={"type": _type_param(entity_type)})
        return [Entity.model_validate(item) for item in data or []]

    async def search(self, query: str, entity_type: Optional[EntityType] = None) -> List[Entity]:
        params = {"q": query, "type": _type_param(entity_type)}
        data = await self.gateway.get("/api/entities/search", params=params)
        return [Entity.model_validate(item) for item in data or []]

    async def list_archived(self) -> List[Entity]:
        data = await self.gateway.get("/api/entities/archived")
        return [Entity.model_validate(item) for item in data or []]

    async def restore(self, entity_id: str) -> Entity:
        return Entity.model_validate(await self.gateway.post(f"/api/entities/{entity_id}/restore"))


class TrackingService(_ApiService):
    """Habit check-ins and the derived heatmap/stats views."""

    async def track(self, entity_id: str, request: Optional[TrackRequest] = None) -> TrackingEvent:
        body = (request or TrackRequest()).to_wire()
        data = await self.gateway.post(f"/api/entities/{entity_id}/track", json=body)
        return TrackingEvent.model_validate(data)

    async def untrack(self, entity_id: str, date: str) -> None:
        await self.gateway.delete(f"/api/entities/{entity_id}/track", params={"date": date})

    async def heatmap(
        self, entity_id: str, date_from: Optional[str] = None, date_to: Optional[str] = None
    ) -> Dict[str, int]:
        params = {"from": date_from, "to": date_to}
        data = await self.gateway.get(f"/api/entities/{entity_id}/heatmap", params=params)
        return {str(day): int(count) for day, count in (data or {}).items()}

    async def stats(self, entity_id: str) -> TrackingStats:
        return TrackingStats.model_validate(await self.gateway.get(f"/api/entities/{entity_id}/stats"))

    async def today(self) -> List[TrackingEvent]:
        data = await self.gateway.get("/api/tracking/today")
        return [TrackingEvent.model_validate(item) for item in data or []]


class MetricsService(_ApiService):
    async def dashboard(self) -> DashboardMetrics:
        return DashboardMetrics.model_validate(await self.gateway.get("/api/metrics/dashboard"))

    async def timeline(self, entity_id: str) -> EntityTimeline:
        data = await self.gateway.get(f"/api/metrics/entities/{entity_id}/timeline")
        return EntityTimeline.model_validate(data)


class FolderService(_ApiService):
    async def create(self, name: str, parent_id: Optional[str] = None) -> Folder:
        body = CreateFolderRequest(name=name, parent_id=parent_id).to_wire()
        return Folder.model_validate(await self.gateway.post("/api/folders", json=body))

    async def list(self) -> List[Folder]:
        data = await self.gateway.get("/api/folders")
        return [Folder.model_validate(item) for item in data or []]

    async def rename(self, folder_id: str, name: str) -> Folder:
        data = await self.gateway.patch(f"/api/folders/{folder_id}/rename", json={"name": name})
        return Folder.model_validate(data)

    async def move(self, folder_id: str, parent_id: Optional[str]) -> Folder:
        data = await self.gateway.patch(f"/api/folders/{folder_id}/move", json={"parentId": parent_id})
        return Folder.model_validate(data)

    async def delete(self, folder_id: str) -> None:
        await self.gateway.delete(f"/api/folders/{folder_id}")


class SubscriptionService(_ApiService):
    async def me(self) -> Subscription:
        return Subscription.model_validate(await self.gateway.get("/api/subscriptions/me"))

    async def checkout(self, price_id: str) -> CheckoutSession:
        data = await self.gateway.post("/api/subscriptions/checkout", json={"priceId": price_id})
        return CheckoutSession.model_validate(data)

    async def cancel(self) -> Subscription:
        return Subscription.model_validate(await self.gateway.post("/api/subscriptions/cancel"))


class AccountService(_ApiService):
    async def update(self, username: Optional[str] = None, email: Optional[str] = None) -> None:
        body = AccountUpdateRequest(username=username, email=email).to_wire()
        await self.gateway.patch("/api/account/me", json=body)

    async def change_password(self, current_password: str, new_password: str) -> None:
        body = ChangePasswordRequest(current_password=current_password, new_password=new_password).to_wire()
        await self.gateway.post("/api/account/password/change", json=body)

    async def forgot(self, email: str) -> None:
        await self.gateway.post("/api/account/password/forgot", json={"email": email}, authenticate=False)

    async def reset(self, token: str, new_password: str) -> None:
        body: Dict[str, Any] = {"token": token, "newPassword": new_password}
        await self.gateway.post("/api/account/password/reset", json=body, authenticate=False)
