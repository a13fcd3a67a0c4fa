import threading
import uuid
from contextlib import contextmanager

import redis
from tenacity import RetryError

from easybuy.domain.errors import ConcurrencyConflict, UpstreamError
from easybuy.utils.retry import redis_retry, lock_polling
from easybuy.utils.settings import REDIS_URL, LOCK_BACKEND, LOCK_TTL_SECONDS, LOCK_WAIT_SECONDS
from easybuy.utils.logging import get_logger

logger = get_logger(__name__)

#LUA porownaj i usun, atomicity
_RELEASE_LUA = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
else
    return 0
end
"""

#redis wykonuje skrypt lua atomowo, nie mozna wcisnac sie miedzy GET a DEL
#wiec lock zwalnia tylko ten request ktory go zalozyl (owner token)


class LockService:
    """
    -mutex per uzytkownik na cykl load-mutate-save aggregate
    -zakladanie przez SET NX EX, zwalnianie przez lua
    -TTL zeby padniety proces nie zablokowal usera na zawsze
    """

    def __init__(
        self,
        url: str | None = None,
        ttl: int = LOCK_TTL_SECONDS,
        wait_seconds: float = LOCK_WAIT_SECONDS,
        client: redis.Redis | None = None,
    ):
        self.redis = client or redis.Redis.from_url(
            url or REDIS_URL,
            decode_responses=True,
        )
        self.ttl = ttl
        self.wait_seconds = wait_seconds

    @staticmethod
    def _key(user_id: int) -> str:
        return f"user:{user_id}:lock"

    @redis_retry()
    def acquire_user_lock(self, user_id: int, owner: str) -> bool:
        #SET user:1:lock "<owner>" NX EX 30
        return bool(self.redis.set(name=self._key(user_id), value=owner, nx=True, ex=self.ttl))

    @redis_retry()
    def release_user_lock(self, user_id: int, owner: str) -> bool:
        res = self.redis.eval(_RELEASE_LUA, 1, self._key(user_id), owner)
        return bool(res)

    def _release(self, user_id: int, owner: str, propagate: bool) -> None:
        try:
            released = self.release_user_lock(user_id, owner)
        except redis.RedisError as e:
            logger.error(f"Lock {self._key(user_id)} release failed, TTL will free it: {e}")
            if propagate:
                raise UpstreamError(f"Lock backend unavailable: {e}") from e
            return
        if not released:
            logger.warning(f"Lock {self._key(user_id)} expired before release")

    @contextmanager
    def hold(self, user_id: int):
        owner = uuid.uuid4().hex
        try:
            lock_polling(self.wait_seconds)(self.acquire_user_lock, user_id, owner)
        except redis.RedisError as e:
            raise UpstreamError(f"Lock backend unavailable: {e}") from e
        except RetryError:
            logger.warning(f"Lock {self._key(user_id)} busy for {self.wait_seconds}s")
            raise ConcurrencyConflict("User is busy with another request, retry later")

        try:
            yield
        except BaseException:
            # blad z ciala ma pierwszenstwo przed bledem zwalniania
            self._release(user_id, owner, propagate=False)
            raise
        self._release(user_id, owner, propagate=True)


class LocalLockService:
    """To samo co LockService ale w pamieci procesu (jeden worker, testy)."""

    def __init__(self, wait_seconds: float = LOCK_WAIT_SECONDS):
        self.wait_seconds = wait_seconds
        self._guard = threading.Lock()
        # user_id -> [lock, ilu trzyma albo czeka], wpis znika przy zerze
        self._locks: dict[int, list] = {}

    def _checkout(self, user_id: int) -> threading.Lock:
        with self._guard:
            entry = self._locks.setdefault(user_id, [threading.Lock(), 0])
            entry[1] += 1
            return entry[0]

    def _checkin(self, user_id: int) -> None:
        with self._guard:
            entry = self._locks[user_id]
            entry[1] -= 1
            if entry[1] == 0:
                del self._locks[user_id]

    @contextmanager
    def hold(self, user_id: int):
        lock = self._checkout(user_id)
        try:
            if not lock.acquire(timeout=self.wait_seconds):
                logger.warning(f"Local lock for user {user_id} busy for {self.wait_seconds}s")
                raise ConcurrencyConflict("User is busy with another request, retry later")
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(user_id)


def build_lock_service(backend: str | None = None):
    backend = backend or LOCK_BACKEND
    if backend == "redis":
        return LockService()
    if backend == "local":
        return LocalLockService()
    raise ValueError(f"Unknown lock backend: {backend}")
