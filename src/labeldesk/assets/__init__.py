"""Asset identity, format sniffing, and listing."""

from .catalog import AssetCatalog, is_in_exact_folder_path
from .fetchers import ByteRangeFetcher, FetchError, HttpRangeFetcher, LocalFileFetcher, SchemeFetcher
from .identity import AssetIdentity, asset_type_for_format, encode_file_uri, path_digest
from .models import Asset, AssetState, AssetType
from .sniffer import SIGNATURES, SNIFF_BYTES_NEEDED, FormatSniffer, Signature

__all__ = [
    "Asset",
    "AssetCatalog",
    "AssetIdentity",
    "AssetState",
    "AssetType",
    "ByteRangeFetcher",
    "FetchError",
    "FormatSniffer",
    "HttpRangeFetcher",
    "LocalFileFetcher",
    "SIGNATURES",
    "SNIFF_BYTES_NEEDED",
    "SchemeFetcher",
    "Signature",
    "asset_type_for_format",
    "encode_file_uri",
    "is_in_exact_folder_path",
    "path_digest",
]
