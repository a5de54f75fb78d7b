#!/usr/bin/env python3
"""Health Monitor API exposing the local replica set member state.

Read-only companion to the rotation tool: external monitors call
``GET /health`` to learn whether the local node is healthy and connected to
its replica set. It reads the same cluster state model the rotation uses and
never issues a stepdown.
"""

import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader, APIKeyQuery

from .cluster_admin_client import ClusterAdminClient
from .cluster_state import MemberRole
from .errors import NotReplicaSetMember, RotationError, SelfMemberNotFound
from .print_manager import printer as default_printer

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
api_key_query = APIKeyQuery(name="token", auto_error=False)
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class HealthMonitorSettings:
    """Connection and authentication settings for the health API"""

    token: str = ""
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    auth_db: str = "admin"
    tls: bool = False
    timeout: float = 10
    listen_port: int = 3000

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "HealthMonitorSettings":
        return cls(
            token=environ.get("HEALTH_CHECK_TOKEN", ""),
            host=environ.get("MONGODB_HOST", "localhost"),
            port=int(environ.get("MONGODB_PORT", "27017")),
            username=environ.get("MONGODB_USER", ""),
            password=environ.get("MONGODB_PASSWORD", ""),
            auth_db=environ.get("MONGODB_AUTH_DB", "admin"),
            tls=environ.get("MONGODB_ENABLE_TLS", "").lower() in ("1", "true", "yes"),
            listen_port=int(environ.get("PORT", "3000")),
        )


class HealthAuthError(Exception):
    """Authentication failure rendered as a JSON status document"""

    def __init__(self, status_code: int, label: str, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.label = label
        self.message = message


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _status_document(label: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    document = {"status": label, "message": message, "timestamp": _timestamp()}
    if details is not None:
        document["details"] = details
    return document


def perform_health_check(client: Any) -> Dict[str, Any]:
    """
    Assess the local node through the admin client.

    Args:
        client: ClusterAdminClient (or compatible) for the local node

    Returns:
        dict: success flag, message and details
    """
    try:
        if not client.ping():
            raise RotationError("Ping command failed")

        try:
            snapshot = client.get_status()
        except NotReplicaSetMember:
            return {
                "success": True,
                "message": "MongoDB health check passed - standalone instance is healthy",
                "details": {"instanceType": "standalone", "standalone": True},
            }

        try:
            me = snapshot.self_member
        except SelfMemberNotFound:
            me = None
        if me is None or me.health != 1:
            state = me.state_str if me else "unknown"
            raise RotationError(f"Current node health is not optimal. State: {state}")

        if not snapshot.has_leader:
            raise RotationError("No primary node found in replica set")

        disconnected = [f"{m.name} ({m.state_str})" for m in snapshot.peers() if m.health != 1 or m.is_down]
        if disconnected:
            raise RotationError(f"Replica connectivity issues: {', '.join(disconnected)}")

        return {
            "success": True,
            "message": "MongoDB health check passed - node is healthy and connected to replica set",
            "details": {
                "replicaSet": snapshot.set_name,
                "nodeState": me.state_str,
                "nodeHealth": me.health,
                "role": me.role.value,
                "isPrimary": me.role is MemberRole.LEADER,
                "hasPrimary": True,
            },
        }
    except RotationError as e:
        return {
            "success": False,
            "message": f"MongoDB health check failed: {e}",
            "details": {"error": str(e), "code": type(e).__name__},
        }
    finally:
        client.close()


def create_app(settings: HealthMonitorSettings, client_factory: Optional[Callable[[], Any]] = None) -> FastAPI:
    """
    Build the health monitor application.

    Args:
        settings: Connection and authentication settings
        client_factory: Callable returning a fresh admin client per request

    Returns:
        FastAPI: The application
    """
    if client_factory is None:

        def client_factory():
            return ClusterAdminClient(
                settings.username,
                settings.password,
                settings.auth_db,
                host=settings.host,
                port=settings.port,
                timeout=settings.timeout,
                tls=settings.tls,
            )

    app = FastAPI(title="MongoDB Health Check Service")

    @app.exception_handler(HealthAuthError)
    async def auth_error_handler(request: Request, exc: HealthAuthError):
        return JSONResponse(status_code=exc.status_code, content=_status_document(exc.label, exc.message))

    def verify_token(
        authorization: Optional[str] = Depends(authorization_header),
        api_key: Optional[str] = Depends(api_key_header),
        query_token: Optional[str] = Depends(api_key_query),
    ) -> None:
        if not settings.token:
            default_printer.print_error("HEALTH_CHECK_TOKEN not configured in environment variables")
            raise HealthAuthError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, "error", "Authentication not properly configured"
            )

        # Any other Authorization scheme is compared as-is and so rejected with 403
        if authorization and authorization.startswith(BEARER_PREFIX):
            authorization = authorization[len(BEARER_PREFIX):]
        token = authorization or api_key or query_token
        if not token:
            raise HealthAuthError(status.HTTP_401_UNAUTHORIZED, "unauthorized", "Authentication token required.")
        if not secrets.compare_digest(token.encode(), settings.token.encode()):
            raise HealthAuthError(status.HTTP_403_FORBIDDEN, "forbidden", "Invalid authentication token")

    @app.get("/health", dependencies=[Depends(verify_token)])
    def health():
        try:
            result = perform_health_check(client_factory())
        except Exception as e:
            default_printer.print_error(f"Unexpected error during health check: {e}")
            document = _status_document("error", "Unexpected error during health check")
            document["error"] = str(e)
            return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=document)

        if result["success"]:
            return JSONResponse(
                status_code=status.HTTP_200_OK,
                content=_status_document("healthy", result["message"], result["details"]),
            )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_status_document("unhealthy", result["message"], result["details"]),
        )

    return app


def main():
    """Serve the health monitor with uvicorn using settings from the environment."""
    import uvicorn

    settings = HealthMonitorSettings.from_environ(os.environ)
    default_printer.print_info(f"MongoDB Health Check Service listening on port {settings.listen_port}")
    default_printer.print_info(f"Health check endpoint: http://localhost:{settings.listen_port}/health")
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.listen_port)


if __name__ == "__main__":
    main()
