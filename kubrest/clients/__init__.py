"""
All the routines to talk to Kubernetes API.

These are the low-level functions: each of them makes exactly one API request
for one resource, and converts the response into the client's structures.
They are used by the repositories, and are not supposed to be used directly,
though nothing prevents this.

The underlying HTTP client is ``aiohttp``, so all the routines are coroutines.
The session, the server address, and the credentials are carried
in `auth.APIContext`, which is passed explicitly to every call.
"""
