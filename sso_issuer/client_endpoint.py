"""
Client registration (POST /client) and lookup (GET /client).
"""
from fastapi import APIRouter, Depends

from sso_issuer.issuer import Issuer, get_issuer

router = APIRouter()


@router.post("/client")
def create_client(issuer: Issuer = Depends(get_issuer)):
    """Generate a new client_id/client_secret pair; the previous pair stops working."""
    return issuer.clients.generate_credentials().to_dict()


@router.get("/client")
def get_client(issuer: Issuer = Depends(get_issuer)):
    """Return the active credentials, or a message if none exist or they expired."""
    credentials = issuer.clients.get_credentials()
    if credentials is None:
        return {"message": "No client credentials found or they have expired"}
    return {"message": "Client credentials retrieved from cache", "credentials": credentials.to_dict()}
