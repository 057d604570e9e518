from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from app.services.jwt_service import JwtService

security = HTTPBearer(auto_error=False)

def jwt_middleware(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    jwt_service: JwtService = Depends(lambda: JwtService())
):
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    token = credentials.credentials
    try:
        payload = jwt_service.verify_token(token)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e))

    payload["user_id"] = int(payload["user_id"])
    return payload
