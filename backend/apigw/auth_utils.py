"""
Utilitaires d'identification du client.

Trust model:
- l'adresse réseau de la connexion est la source de vérité;
- `X-Forwarded-For` n'est lu que si le service est explicitement derrière un
  proxy de confiance (`TRUST_PROXY_HEADERS`), sinon il serait falsifiable.
"""

from fastapi import Request

UNKNOWN_ADDRESS = "unknown"


def extract_client_address(request: Request, trust_proxy: bool = False) -> str:
    """Retourne l'adresse cliente servant de clé au rate limit et au brute-force."""
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_ADDRESS
