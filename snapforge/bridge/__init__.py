"""Bridge layer between snapforge and the remote diffing service.

Modules
-------
gateway
    ``RemoteBuildGateway`` Protocol and ``GatewayError``; the only contract
    the build session depends on.
http_gateway
    ``PercyHttpGateway``, the httpx implementation of that contract for
    the Percy API v1.
"""
