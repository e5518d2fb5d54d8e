"""Lookup helpers shared by the admin routers"""
from fastapi import HTTPException
from typing import Optional


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id:
            raise HTTPException(
                status_code=404,
                detail=f"{resource_name} with id {resource_id} not found"
            )
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")


def check_duplicate(existing, detail: str) -> None:

    if existing:
        raise HTTPException(status_code=400, detail=detail)
