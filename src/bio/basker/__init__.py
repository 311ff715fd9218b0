"""
Basker - link-in-bio profiles on the AT Protocol

This package implements the Basker server. Profile data (links, notes, stories, widgets and settings) lives in the
user's own AT Protocol repository, so the server stays thin: it proxies public profile lookups and hosts two small
in-memory subsystems that need a trusted party.

Key Components:
- app: Web application layer with request handlers, middleware and server configuration
- admin: Admin capability gate and the employment verification request registry
- moderation: Moderator registry and the report backend that talks to AT Protocol moderation services
- atproto: Thin XRPC helpers for PDS and AppView calls
- model: Pydantic records shared by the registries and the handlers

Request Flow:
1. A handler reads the caller's DID from the X-User-DID header
2. The relevant gate (admin or moderator) is checked
3. The registry is read or mutated
4. Errors raised anywhere in the handler are classified into a status code by one middleware

Nothing is persisted. Registries live for the lifetime of the web application and are injected into handlers
through the application's AppKeys.
"""
