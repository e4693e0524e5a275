"""Adapter layer package for identity-service and document-store boundaries."""

from .firestore_rest import FirestoreRestDocumentStore, adapter_firestore_error_code
from .identity import CachedIdentityService
from .interfaces import AccessTokenProviderPort, DocumentStorePort, IdentityServicePort, Principal
from .service_account import ServiceAccountCredentials, ServiceAccountError, adapter_parse_service_account
from .service_account_token import DATASTORE_SCOPE, ServiceAccountTokenProvider

__all__ = [
	"AccessTokenProviderPort",
	"CachedIdentityService",
	"DATASTORE_SCOPE",
	"DocumentStorePort",
	"FirestoreRestDocumentStore",
	"IdentityServicePort",
	"Principal",
	"ServiceAccountCredentials",
	"ServiceAccountError",
	"ServiceAccountTokenProvider",
	"adapter_firestore_error_code",
	"adapter_parse_service_account",
]
