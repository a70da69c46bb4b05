from fastapi import Header, HTTPException, status

import config


async def get_api_key(x_apikey: str = Header(None)):
    """
    Validate the shared secret sent in the x-apikey header.
    """
    if x_apikey != config.API_KEY:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key"
        )
    return x_apikey
