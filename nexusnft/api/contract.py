"""
Registry interface description.

Describes the operations and events of a collection in the ABI-like form
wallets and explorers expect, together with the network it runs on.
"""

from typing import Any

from fastapi import APIRouter

from nexusnft.config import settings

router = APIRouter(tags=["contract"])

CONTRACT_NAME = "SimpleNFT"


def _param(name: str, type_: str, indexed: bool | None = None) -> dict[str, Any]:
    param: dict[str, Any] = {"name": name, "type": type_}
    if indexed is not None:
        param["indexed"] = indexed
    return param


def _function(
    name: str,
    inputs: list[dict[str, Any]],
    outputs: list[dict[str, Any]] | None = None,
    mutability: str = "view",
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": inputs,
        "outputs": outputs or [],
        "stateMutability": mutability,
    }


def _event(name: str, inputs: list[dict[str, Any]]) -> dict[str, Any]:
    return {"type": "event", "name": name, "inputs": inputs, "anonymous": False}


ABI: list[dict[str, Any]] = [
    {
        "type": "constructor",
        "inputs": [
            _param("name", "string"),
            _param("symbol", "string"),
            _param("initialOwner", "address"),
        ],
        "stateMutability": "nonpayable",
    },
    _function("mint", [], mutability="nonpayable"),
    _function("setBaseURI", [_param("baseURI", "string")], mutability="nonpayable"),
    _function("freezeMetadata", [], mutability="nonpayable"),
    _function(
        "transferFrom",
        [_param("from", "address"), _param("to", "address"), _param("tokenId", "uint256")],
        mutability="nonpayable",
    ),
    _function(
        "approve",
        [_param("to", "address"), _param("tokenId", "uint256")],
        mutability="nonpayable",
    ),
    _function(
        "setApprovalForAll",
        [_param("operator", "address"), _param("approved", "bool")],
        mutability="nonpayable",
    ),
    _function("name", [], [_param("", "string")]),
    _function("symbol", [], [_param("", "string")]),
    _function("owner", [], [_param("", "address")]),
    _function("totalSupply", [], [_param("", "uint256")]),
    _function("isMetadataFrozen", [], [_param("", "bool")]),
    _function("tokenURI", [_param("tokenId", "uint256")], [_param("", "string")]),
    _function("ownerOf", [_param("tokenId", "uint256")], [_param("", "address")]),
    _function("balanceOf", [_param("owner", "address")], [_param("", "uint256")]),
    _function("getApproved", [_param("tokenId", "uint256")], [_param("", "address")]),
    _function(
        "isApprovedForAll",
        [_param("owner", "address"), _param("operator", "address")],
        [_param("", "bool")],
    ),
    _event(
        "Transfer",
        [
            _param("from", "address", True),
            _param("to", "address", True),
            _param("tokenId", "uint256", True),
        ],
    ),
    _event(
        "Approval",
        [
            _param("owner", "address", True),
            _param("approved", "address", True),
            _param("tokenId", "uint256", True),
        ],
    ),
    _event(
        "ApprovalForAll",
        [
            _param("owner", "address", True),
            _param("operator", "address", True),
            _param("approved", "bool", False),
        ],
    ),
    _event("MetadataUpdate", [_param("_tokenId", "uint256", False)]),
    _event(
        "BatchMetadataUpdate",
        [_param("_fromTokenId", "uint256", False), _param("_toTokenId", "uint256", False)],
    ),
    _event(
        "OwnershipTransferred",
        [_param("previousOwner", "address", True), _param("newOwner", "address", True)],
    ),
]


@router.get("/contract-artifact")
async def get_contract_artifact() -> dict[str, Any]:
    """Return the collection interface and the network it is deployed on."""
    return {
        "contractName": CONTRACT_NAME,
        "abi": ABI,
        "network": {
            "name": settings.network_name,
            "chainId": settings.chain_id,
            "explorerUrl": settings.explorer_url,
        },
    }
