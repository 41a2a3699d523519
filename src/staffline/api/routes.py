from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from staffline.api.deps import get_current_user, get_db, require_admin
from staffline.api.schemas import (
    ApplicationResponse,
    ApplicationStats,
    CatalogItemResponse,
    Envelope,
    PageEnvelope,
    ProviderResponse,
    ReviewResponse,
    TokenResponse,
    UploadResponse,
    UserResponse,
)
from staffline.api.views import load_provider_view, pagination, provider_view
from staffline.core import accounts, catalog, intake, providers
from staffline.core.approval import ApprovalService
from staffline.core.errors import AuthenticationError
from staffline.core.security import create_access_token, verify_password
from staffline.core.storage import LicenseStore
from staffline.db.models import User
from staffline.db.repositories import Repository
from staffline.types import (
    ApplicationCreate,
    ApplicationReview,
    ApplicationStatus,
    CatalogItemCreate,
    CatalogItemUpdate,
    LoginRequest,
    ProviderCreate,
    ProviderUpdate,
    UserCreate,
)

router = APIRouter(prefix="/api", tags=["api"])


@router.post("/auth/login", response_model=Envelope[TokenResponse])
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> Envelope[TokenResponse]:
    user = Repository(db).get_user_by_username(payload.username)
    if user is None or not user.active or not verify_password(user.password_hash, payload.password):
        raise AuthenticationError("Invalid credentials")

    token = create_access_token(user.id, role=user.role)
    return Envelope(
        message="Login successful",
        data=TokenResponse(access_token=token, user=UserResponse.model_validate(user)),
    )


@router.get("/auth/me", response_model=Envelope[UserResponse])
def me(user: User = Depends(get_current_user)) -> Envelope[UserResponse]:
    return Envelope(message="User retrieved successfully", data=UserResponse.model_validate(user))


@router.post("/auth/logout", response_model=Envelope[None])
def logout(_: User = Depends(get_current_user)) -> Envelope[None]:
    # tokens are stateless; the client discards its copy
    return Envelope(message="Logout successful")


@router.post("/auth/register", response_model=Envelope[UserResponse], status_code=201)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> Envelope[UserResponse]:
    user = accounts.register_user(db, payload)
    return Envelope(message="User created successfully", data=UserResponse.model_validate(user))


# applications


@router.post("/applications", response_model=Envelope[ApplicationResponse], status_code=201)
def submit_application(payload: ApplicationCreate, db: Session = Depends(get_db)) -> Envelope[ApplicationResponse]:
    application = intake.submit_application(db, payload)
    return Envelope(
        message="Application submitted successfully",
        data=ApplicationResponse.model_validate(application),
    )


@router.get("/applications", response_model=PageEnvelope[ApplicationResponse])
def list_applications(
    status: ApplicationStatus | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> PageEnvelope[ApplicationResponse]:
    result = Repository(db).list_applications(status=status, search=search, page=page, limit=limit)
    return PageEnvelope(
        message="Applications retrieved successfully",
        data=[ApplicationResponse.model_validate(row) for row in result.items],
        pagination=pagination(result),
    )


@router.get("/applications/stats", response_model=Envelope[ApplicationStats])
def application_stats(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[ApplicationStats]:
    stats = Repository(db).application_stats()
    return Envelope(message="Application statistics retrieved successfully", data=ApplicationStats(**stats))


@router.get("/applications/{application_id}", response_model=Envelope[ApplicationResponse])
def get_application(
    application_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[ApplicationResponse]:
    application = intake.get_application_or_404(db, application_id)
    return Envelope(
        message="Application retrieved successfully",
        data=ApplicationResponse.model_validate(application),
    )


@router.post("/applications/{application_id}/review", response_model=Envelope[ReviewResponse])
def review_application(
    application_id: int,
    payload: ApplicationReview,
    db: Session = Depends(get_db),
    reviewer: User = Depends(get_current_user),
) -> Envelope[ReviewResponse]:
    outcome = ApprovalService(db).review(application_id, payload, reviewer_id=reviewer.id)
    return Envelope(
        message=outcome.message,
        data=ReviewResponse(
            application=ApplicationResponse.model_validate(outcome.application),
            provider=provider_view(outcome.provider, outcome.application) if outcome.provider else None,
        ),
    )


@router.delete("/applications/{application_id}", response_model=Envelope[None])
def delete_application(
    application_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> Envelope[None]:
    intake.delete_application(db, application_id)
    return Envelope(message="Application deleted successfully")


# service providers


@router.get("/providers", response_model=PageEnvelope[ProviderResponse])
def list_providers(
    active: bool | None = None,
    service: str | None = None,
    search: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> PageEnvelope[ProviderResponse]:
    repo = Repository(db)
    result = repo.list_providers(active=active, service=service, search=search, page=page, limit=limit)
    applications = repo.provider_applications(result.items)
    return PageEnvelope(
        message="Service providers retrieved successfully",
        data=[provider_view(row, applications.get(row.application_id)) for row in result.items],
        pagination=pagination(result),
    )


@router.get("/providers/{provider_id}", response_model=Envelope[ProviderResponse])
def get_provider(
    provider_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[ProviderResponse]:
    provider = providers.get_provider_or_404(db, provider_id)
    return Envelope(message="Service provider retrieved successfully", data=load_provider_view(Repository(db), provider))


@router.post("/providers", response_model=Envelope[ProviderResponse], status_code=201)
def create_provider(
    payload: ProviderCreate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[ProviderResponse]:
    provider = providers.create_provider(db, payload)
    return Envelope(message="Service provider created successfully", data=load_provider_view(Repository(db), provider))


@router.put("/providers/{provider_id}", response_model=Envelope[ProviderResponse])
def update_provider(
    provider_id: int,
    payload: ProviderUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_user),
) -> Envelope[ProviderResponse]:
    provider = providers.update_provider(db, provider_id, payload)
    return Envelope(message="Service provider updated successfully", data=load_provider_view(Repository(db), provider))


@router.delete("/providers/{provider_id}", response_model=Envelope[None])
def delete_provider(
    provider_id: int,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
) -> Envelope[None]:
    providers.delete_provider(db, provider_id)
    return Envelope(message="Service provider deleted successfully")


# uploads


@router.post("/uploads/license", response_model=Envelope[UploadResponse], status_code=201)
async def upload_license(file: UploadFile = File(...)) -> Envelope[UploadResponse]:
    content = await file.read()
    stored = LicenseStore().save(file.filename or "", content)
    return Envelope(
        message="File uploaded successfully",
        data=UploadResponse(
            filename=stored.filename,
            original_name=stored.original_name,
            size=stored.size,
            url=stored.url,
        ),
    )


@router.get("/uploads/{filename}")
def download_upload(filename: str, _: User = Depends(get_current_user)) -> FileResponse:
    return FileResponse(LicenseStore().path_for(filename))


# catalog


def _register_catalog_routes(kind: str, plural: str) -> None:
    model = catalog.CATALOG_MODELS[kind]
    label = kind.capitalize()

    @router.get(f"/{plural}", response_model=Envelope[list[CatalogItemResponse]], name=f"list_{plural}")
    def list_items(
        active: bool | None = None,
        search: str | None = None,
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> Envelope[list[CatalogItemResponse]]:
        rows = Repository(db).list_catalog(model, active=active, search=search)
        return Envelope(
            message=f"{label}s retrieved successfully",
            data=[CatalogItemResponse.model_validate(row) for row in rows],
        )

    @router.get(f"/{plural}/{{item_id}}", response_model=Envelope[CatalogItemResponse], name=f"get_{kind}")
    def get_item(
        item_id: int,
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> Envelope[CatalogItemResponse]:
        item = catalog.get_item_or_404(db, model, item_id)
        return Envelope(message=f"{label} retrieved successfully", data=CatalogItemResponse.model_validate(item))

    @router.post(
        f"/{plural}", response_model=Envelope[CatalogItemResponse], status_code=201, name=f"create_{kind}"
    )
    def create_item(
        payload: CatalogItemCreate,
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> Envelope[CatalogItemResponse]:
        item = catalog.create_item(db, model, payload)
        return Envelope(message=f"{label} created successfully", data=CatalogItemResponse.model_validate(item))

    @router.put(f"/{plural}/{{item_id}}", response_model=Envelope[CatalogItemResponse], name=f"update_{kind}")
    def update_item(
        item_id: int,
        payload: CatalogItemUpdate,
        db: Session = Depends(get_db),
        _: User = Depends(get_current_user),
    ) -> Envelope[CatalogItemResponse]:
        item = catalog.update_item(db, model, item_id, payload)
        return Envelope(message=f"{label} updated successfully", data=CatalogItemResponse.model_validate(item))

    @router.delete(f"/{plural}/{{item_id}}", response_model=Envelope[None], name=f"delete_{kind}")
    def delete_item(
        item_id: int,
        db: Session = Depends(get_db),
        _: User = Depends(require_admin),
    ) -> Envelope[None]:
        catalog.delete_item(db, model, item_id)
        return Envelope(message=f"{label} deleted successfully")


_register_catalog_routes("job", "jobs")
_register_catalog_routes("service", "services")
