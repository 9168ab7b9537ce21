"""Supabase (PostgREST) client implementing the PIN store."""
import aiohttp
from typing import Dict, Any, List, Mapping, Optional, Tuple
from pin_generator.config import Config
from pin_generator.errors import StoreError
from pin_generator.models import PIN_FIELD, STATE_FIELD
from pin_generator.store.base import PinStore


# PostgREST default max-rows
PAGE_SIZE = 1000


def parse_content_range(value: Optional[str]) -> Optional[int]:
    """Read the total from a Content-Range header such as '0-9999/10000' or '*/0'."""
    if not value or "/" not in value:
        return None
    total = value.rsplit("/", 1)[1]
    if not total.isdigit():
        return None
    return int(total)


class SupabasePinStore(PinStore):
    """PIN store backed by a Supabase table and two stored procedures."""
    
    def __init__(self, config: Config):
        supabase_config = config.get_supabase_config()
        self.url = supabase_config["url"].rstrip('/')
        self.key = supabase_config["key"]
        self.table = supabase_config["table"]
        self.random_rpc = supabase_config["random_rpc"]
        self.reset_rpc = supabase_config["reset_rpc"]
        self.page_size = PAGE_SIZE
        self.session: Optional[aiohttp.ClientSession] = None
        
        if not self.url:
            print("⚠️  WARNING: SUPABASE_URL is empty or not set!")
        if not self.key:
            print("⚠️  WARNING: SUPABASE_KEY is empty or not set!")
        else:
            key_preview = self.key[:10] + "..." if len(self.key) > 10 else "***"
            print(f"✅ Supabase configured: URL={self.url}, Key={key_preview}")
    
    @property
    def rest_url(self) -> str:
        return f"{self.url}/rest/v1"
    
    async def start(self):
        """Start the HTTP client session."""
        headers = {
            "apikey": self.key,
            "Authorization": f"Bearer {self.key}",
            "Content-Type": "application/json",
        }
        self.session = aiohttp.ClientSession(headers=headers)
    
    async def stop(self):
        """Stop the HTTP client session."""
        if self.session:
            await self.session.close()
            self.session = None
    
    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, str]] = None,
        prefer: Optional[str] = None,
    ) -> Tuple[Any, Mapping[str, str]]:
        """
        Send one request to PostgREST.
        
        Returns:
            The decoded JSON body (None when empty) and the response headers
        
        Raises:
            StoreError: for transport failures and any non-2xx response
        """
        if not self.session:
            await self.start()
        
        url = f"{self.rest_url}/{path}"
        headers = {"Prefer": prefer} if prefer else None
        print(f"🔧 Store call: {method} {url}")
        
        try:
            async with self.session.request(
                method, url, json=json, params=params, headers=headers
            ) as response:
                text = await response.text()
                body = None
                if text:
                    try:
                        body = await response.json(content_type=None)
                    except ValueError:
                        body = text
                
                if response.status >= 400:
                    error = StoreError.from_response(body, response.status)
                    print(f"❌ Store error ({response.status}): {error.message}")
                    raise error
                
                return body, response.headers
        except aiohttp.ClientError as e:
            print(f"❌ Store unreachable: {e}")
            raise StoreError(str(e) or type(e).__name__, code="NETWORK") from e
    
    async def select_all(self) -> Tuple[List[Dict[str, Any]], int]:
        """
        Read every PIN record, one page at a time.
        
        PostgREST caps each response at its max-rows setting and reports the
        real total in Content-Range, so pages are requested until that total
        is reached.
        
        Raises:
            StoreError: a page came back empty before the total was reached
        """
        pins: List[Dict[str, Any]] = []
        total: Optional[int] = None
        
        while True:
            body, headers = await self._request(
                "GET", self.table,
                params={
                    "select": "*",
                    "order": "id",
                    "offset": str(len(pins)),
                    "limit": str(self.page_size),
                },
                prefer="count=exact",
            )
            page = body or []
            pins.extend(page)
            total = parse_content_range(headers.get("Content-Range"))
            
            if total is None:
                if len(page) < self.page_size:
                    break
            elif len(pins) >= total:
                break
            elif not page:
                raise StoreError(
                    f"PIN listing stopped at {len(pins)} of {total} records",
                    hint="The table changed while it was being read, try again",
                )
        
        return pins, total if total is not None else len(pins)
    
    async def bulk_insert(self, pins: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        body, _ = await self._request(
            "POST", self.table, json=[self._row(pin) for pin in pins],
            prefer="return=representation",
        )
        return body or []
    
    async def bulk_upsert(self, pins: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        body, _ = await self._request(
            "POST", self.table, json=[self._row(pin) for pin in pins],
            params={"on_conflict": PIN_FIELD},
            prefer="resolution=merge-duplicates,return=representation",
        )
        return body or []
    
    async def select_random_unallocated(self, quantity: int) -> List[Dict[str, Any]]:
        body, _ = await self._request(
            "POST", f"rpc/{self.random_rpc}", json={"quantity": quantity}
        )
        return body or []
    
    async def reset_allocation(self) -> None:
        await self._request("POST", f"rpc/{self.reset_rpc}", json={})
    
    @staticmethod
    def _row(pin: Dict[str, Any]) -> Dict[str, Any]:
        # IntEnum states serialise as plain integers
        return {key: int(value) if key == STATE_FIELD else value for key, value in pin.items()}
