import logging

from fastapi import APIRouter, Depends, HTTPException

from ..container import AppContainer
from ..core.errors import error_message
from ..types import BalanceModel, TokenBalanceModel, WalletRequest, WalletResponse
from .deps import get_container

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/wallet")
async def create_wallet(request: WalletRequest, container: AppContainer = Depends(get_container)) -> WalletResponse:
    """Create the session wallet, or return the existing one"""

    info = await container.wallets.create_wallet(request.session_id)
    return WalletResponse(session_id=info.session_id, address=info.address, created_at=info.created_at)


@router.get("/wallet/{session_id}")
async def get_wallet(session_id: str, container: AppContainer = Depends(get_container)) -> WalletResponse:
    """Address and live balance of a session wallet"""

    address = await container.wallets.get_address(session_id)
    if address is None:
        raise HTTPException(status_code=404, detail="No wallet found for this session")

    response = WalletResponse(session_id=session_id, address=address)
    try:
        balance = await container.wallets.get_balance(session_id)
    except Exception as e:
        logger.warning(f"Balance lookup failed for {address}: {e}")
        response.balance_error = error_message(e, "balance unavailable")
        return response

    if balance is not None:
        response.balance = BalanceModel(
            eth=balance.eth,
            eth_formatted=balance.eth_formatted,
            tokens=[
                TokenBalanceModel(symbol=t.symbol, address=t.address, balance=t.balance, formatted=t.formatted)
                for t in balance.tokens
            ],
        )
    return response
