from app.issuer.base import BaseTokenIssuer
from app.issuer.database_issuer import DatabaseTokenIssuer
from app.issuer.factory import TokenIssuerFactory
from app.issuer.http_issuer import HttpTokenIssuer

__all__ = ["BaseTokenIssuer", "DatabaseTokenIssuer", "HttpTokenIssuer", "TokenIssuerFactory"]
