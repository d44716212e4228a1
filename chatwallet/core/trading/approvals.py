import logging
from typing import Optional

from ..wallet.signer import MAX_UINT256, SessionSigner


logger = logging.getLogger(__name__)


async def ensure_approval(
    signer: SessionSigner,
    token_address: str,
    spender: str,
    amount: int,
) -> Optional[str]:
    """Make sure `spender` may move `amount` of the token.

    When the allowance is short, approves max uint256 and waits for one
    confirmation before returning. Returns the approval hash, or None when
    no approval was needed.
    """
    current = await signer.allowance(token_address, spender)
    if current >= amount:
        return None

    logger.info(f"Approving {spender} for {token_address} from {signer.address}")
    tx_hash = await signer.approve(token_address, spender, MAX_UINT256)
    await signer.wait_for_confirmation(tx_hash)
    return tx_hash
