"""In-memory user storage.

Users are created the first time a Google account signs in and live for the
lifetime of the store (one per app instance). There is no update or delete.
"""

import threading
from dataclasses import dataclass


@dataclass(frozen=True)
class User:
    id: int
    google_id: str
    display_name: str = ''
    first_name: str = ''
    last_name: str = ''
    image: str = ''
    email: str = ''

    def to_dict(self):
        return {
            'id': self.id,
            'googleId': self.google_id,
            'displayName': self.display_name,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'image': self.image,
            'email': self.email,
        }


class UserStore:
    """Append-only list of users with serialized writes.

    Reads work on a snapshot of the list, so they never block on a writer.
    """

    def __init__(self):
        self._users = []
        self._last_id = 0
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._users)

    def find_by_google_id(self, google_id):
        for user in list(self._users):
            if user.google_id == google_id:
                return user
        return None

    def find_by_id(self, user_id):
        for user in list(self._users):
            if user.id == user_id:
                return user
        return None

    def create(self, profile):
        with self._lock:
            return self._create_locked(profile)

    def get_or_create(self, profile):
        """Return the user for profile['google_id'], creating it if missing.

        Returns a ``(user, created)`` tuple.
        """
        with self._lock:
            existing = self.find_by_google_id(profile['google_id'])
            if existing is not None:
                return existing, False
            return self._create_locked(profile), True

    def _create_locked(self, profile):
        google_id = profile.get('google_id')
        if not google_id:
            raise ValueError('profile is missing google_id')
        self._last_id += 1
        user = User(
            id=self._last_id,
            google_id=google_id,
            display_name=profile.get('display_name') or '',
            first_name=profile.get('first_name') or '',
            last_name=profile.get('last_name') or '',
            image=profile.get('image') or '',
            email=profile.get('email') or '',
        )
        # Rebind instead of appending so readers iterating a snapshot are unaffected
        self._users = self._users + [user]
        return user
