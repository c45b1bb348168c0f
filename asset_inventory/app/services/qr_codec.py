"""
QR payload codec for asset identity

Two payload shapes are recognised:

* locator: ``<base>/asset-detail?id=<asset id>``, resolvable by any generic
  scanner without this application's logic
* fallback record: JSON text ``{"id", "assetTag", "name", "serialNumber"}``,
  used when no public base URL is configured

Only the asset id is ever used as the reference; tag, name and serial in the
fallback record are informational.
"""
import json
from io import BytesIO
from typing import Optional
from urllib.parse import urlencode, urlsplit, parse_qs
import qrcode
from asset_inventory.app.errors import InvalidPayloadError, WrongResourceTypeError
from asset_inventory.app.models import Asset
from asset_inventory.config.settings import PUBLIC_BASE_URL, QR_BOX_SIZE, QR_BORDER

ASSET_DETAIL_PATH = '/asset-detail'
LOCATOR_SCHEMES = ('http', 'https')


class QRCodec:
    """Encode assets into QR payloads and decode scanned payloads to asset ids"""

    def __init__(self, base_url: Optional[str] = PUBLIC_BASE_URL):
        self.base_url = (base_url or '').rstrip('/')

    @property
    def has_locator(self) -> bool:
        """Check if a public base URL is configured"""
        return bool(self.base_url)

    def locator(self, asset_id: str) -> str:
        """Build the asset-detail URL for an id"""
        return f"{self.base_url}{ASSET_DETAIL_PATH}?{urlencode({'id': asset_id})}"

    def encode(self, asset: Asset) -> str:
        """Build the payload to print for an asset"""
        if self.has_locator:
            return self.locator(asset.asset_id)
        return json.dumps({
            'id': asset.asset_id,
            'assetTag': asset.asset_tag,
            'name': asset.name,
            'serialNumber': asset.serial_number,
        })

    def decode(self, payload: str) -> str:
        """Return the asset id referenced by a scanned payload

        Raises InvalidPayloadError for unrecognised payloads and
        WrongResourceTypeError for URLs that are not asset-detail locators.
        """
        if not isinstance(payload, str) or not payload.strip():
            raise InvalidPayloadError('Empty QR payload')

        text = payload.strip()
        if text.startswith('{'):
            return self._decode_record(text)
        return self._decode_locator(text)

    def _decode_record(self, text: str) -> str:
        try:
            data = json.loads(text)
        except ValueError:
            raise InvalidPayloadError('QR payload is not valid JSON') from None

        asset_id = data.get('id') if isinstance(data, dict) else None
        if not isinstance(asset_id, str) or not asset_id.strip():
            raise InvalidPayloadError('QR record has no asset id')
        return asset_id

    def _decode_locator(self, text: str) -> str:
        try:
            parts = urlsplit(text)
        except ValueError:
            raise InvalidPayloadError('QR payload is not a valid URL') from None

        if parts.scheme.lower() not in LOCATOR_SCHEMES or not parts.netloc:
            raise InvalidPayloadError('Invalid QR code format')

        if not parts.path.rstrip('/').endswith(ASSET_DETAIL_PATH):
            raise WrongResourceTypeError('Invalid QR code. Please scan an asset QR code.')

        ids = parse_qs(parts.query).get('id')
        if not ids or not ids[0].strip():
            raise InvalidPayloadError('Asset locator has no id')
        return ids[0]

    def render_png(self, payload: str, box_size: int = QR_BOX_SIZE, border: int = QR_BORDER) -> bytes:
        """Render a payload as a PNG QR image"""
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=box_size,
            border=border,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        buffer = BytesIO()
        img = qr.make_image(fill_color='black', back_color='white')
        img.save(buffer, format='PNG')
        return buffer.getvalue()
