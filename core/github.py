"""
github.py -- Upstream call for a user's public GitHub repositories.

Used by GET /api/profile/github/{username}. The route maps a None result to
"No Github profile found"; this module never raises for upstream problems.
"""

import logging
import re
from typing import Any, Optional

import requests

logger = logging.getLogger("devconnector.github")

GITHUB_REPOS_URL = "https://api.github.com/users/{username}/repos"

# GitHub logins: alphanumerics and single hyphens, max 39 chars. Checked before
# the username is interpolated into the upstream path.
_USERNAME_RE = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}$")

# Module-level session shared across calls for connection pooling.
# max_redirects=3 replaces the requests default of 30.
_session = requests.Session()
_session.max_redirects = 3
_session.headers.update({"User-Agent": "devconnector", "Accept": "application/vnd.github+json"})


def fetch_github_repos(
    username: str,
    client_id: str = "",
    client_secret: str = "",
    timeout: float = 10.0,
) -> Optional[list[dict[str, Any]]]:
    """Return the user's five oldest-created public repos, or None.

    Args:
        username:      GitHub login. Invalid logins return None without a call.
        client_id:     Optional OAuth app client id. Sent as basic auth together
        client_secret: with client_secret to raise the upstream rate limit.
        timeout:       Seconds before the upstream call is abandoned.

    None covers every failure: invalid username, non-200 status, network
    error, timeout, or a body that is not a JSON array.
    """
    if not _USERNAME_RE.match(username):
        return None
    auth = (client_id, client_secret) if client_id and client_secret else None
    try:
        resp = _session.get(
            GITHUB_REPOS_URL.format(username=username),
            params={"per_page": 5, "sort": "created", "direction": "asc"},
            auth=auth,
            timeout=timeout,
        )
        if resp.status_code != 200:
            logger.info("GitHub returned %d for %s", resp.status_code, username)
            return None
        body = resp.json()
    except requests.RequestException as e:
        logger.warning("GitHub fetch failed for %s: %s", username, e)
        return None
    except ValueError:
        logger.warning("GitHub returned a non-JSON body for %s", username)
        return None
    if not isinstance(body, list):
        return None
    return body
