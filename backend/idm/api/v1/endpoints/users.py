"""
Redbard IDM - Users Endpoints
User CRUD, pagination, sign-up and sign-in with HAL responses

Route table:
    GET  /users            ADMIN           paged users
    GET  /users/{id}       ADMIN | CLIENT  one user
    POST /users            ADMIN           create user
    PUT  /users/{id}       ADMIN | CLIENT  update user
    POST /users/signup     public          create user
    POST /users/signin     public          authenticate
"""

from fastapi import APIRouter, Depends, Query, Request, status

from idm.api.assemblers import UserModelAssembler
from idm.api.hateoas import (
    HALResponse,
    Link,
    NEXT,
    PageMetadata,
    PagedModel,
    ROUTES,
    SELF,
    link_to,
)
from idm.auth.dependencies import require_admin, require_admin_or_client
from idm.core.config import settings
from idm.core.exceptions import AccessDeniedError, ResourceNotFoundError
from idm.monitoring.metrics import MetricsCollector, profile
from idm.schemas.user import AuthRequestDTO, UserDTO
from idm.services.user_service import UserService, get_user_service


router = APIRouter(default_response_class=HALResponse)

# Largest page index whose row offset still fits a signed 64-bit integer
MAX_PAGE = (2 ** 63 - 1) // settings.MAX_PAGE_SIZE - 1


def get_base_url(request: Request) -> str:
    """Absolute URL the API is mounted at, used as the root of every link"""
    return str(request.base_url).rstrip("/") + settings.API_PREFIX


def get_assembler(base_url: str = Depends(get_base_url)) -> UserModelAssembler:
    return UserModelAssembler(base_url)


async def _create_user(
    user: UserDTO,
    user_service: UserService,
    assembler: UserModelAssembler,
) -> HALResponse:
    entity_model = assembler.to_model(await user_service.create_user(user))
    return HALResponse(
        content=entity_model.to_dict(),
        status_code=status.HTTP_201_CREATED,
        headers={"Location": entity_model.get_required_link(SELF).href},
    )


# Public routes first so they never fall through to /users/{id}

@router.post(ROUTES["signup"], status_code=status.HTTP_201_CREATED, summary="Sign Up")
@profile("UserController#signup")
async def signup(
    user: UserDTO,
    user_service: UserService = Depends(get_user_service),
    assembler: UserModelAssembler = Depends(get_assembler),
):
    """
    Register a new user

    Responds exactly like POST /users. Errors: 400 bad request,
    403 access denied, 422 username already in use.
    """
    response = await _create_user(user, user_service, assembler)
    MetricsCollector.record_user_created("signup")
    return response


@router.post(ROUTES["signin"], summary="Sign In")
@profile("UserController#signin")
async def signin(
    auth_request: AuthRequestDTO,
    user_service: UserService = Depends(get_user_service),
    assembler: UserModelAssembler = Depends(get_assembler),
):
    """
    Authenticate with username and password

    The returned user carries an access token. Errors: 400 bad request,
    403 access denied.
    """
    try:
        user = await user_service.authenticate_user(auth_request.username, auth_request.password)
    except AccessDeniedError:
        MetricsCollector.record_signin_attempt(False)
        raise
    MetricsCollector.record_signin_attempt(True)
    return assembler.to_model(user).to_dict()


@router.get(ROUTES["users"], dependencies=[Depends(require_admin)])
@profile("UserController#getAllUsers")
async def get_all_users(
    page: int = Query(0, ge=0, le=MAX_PAGE),
    size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    user_service: UserService = Depends(get_user_service),
    base_url: str = Depends(get_base_url),
):
    """
    List users one page at a time

    The next link always points at page + 1, even on the last page.
    """
    assembler = UserModelAssembler(base_url)
    users = [assembler.to_model(user) for user in await user_service.get_all_users(page, size)]

    paged_model = PagedModel(
        users,
        PageMetadata.of(size=size, number=page, total_elements=await user_service.get_total_count()),
        [
            Link(rel=SELF, href=link_to(base_url, "users", page=page, size=size)),
            Link(rel=NEXT, href=link_to(base_url, "users", page=page + 1, size=size)),
        ],
        relation=UserDTO.collection_relation,
    )
    return paged_model.to_dict()


@router.get(ROUTES["user"], dependencies=[Depends(require_admin_or_client)])
@profile("UserController#getUserById")
async def get_user_by_id(
    id: str,
    user_service: UserService = Depends(get_user_service),
    assembler: UserModelAssembler = Depends(get_assembler),
):
    user = await user_service.get_user_by_id(id)

    if user is None:
        raise ResourceNotFoundError(id)

    return assembler.to_model(user).to_dict()


@router.post(ROUTES["users"], status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
@profile("UserController#createUser")
async def create_user(
    user: UserDTO,
    user_service: UserService = Depends(get_user_service),
    assembler: UserModelAssembler = Depends(get_assembler),
):
    response = await _create_user(user, user_service, assembler)
    MetricsCollector.record_user_created("admin")
    return response


@router.put(ROUTES["user"], dependencies=[Depends(require_admin_or_client)])
@profile("UserController#updateUser")
async def update_user(
    id: str,
    user: UserDTO,
    user_service: UserService = Depends(get_user_service),
    assembler: UserModelAssembler = Depends(get_assembler),
):
    updated = await user_service.update_user(id, user)

    if updated is None:
        raise ResourceNotFoundError(id)

    return assembler.to_model(updated).to_dict()
