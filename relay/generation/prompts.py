"""
generation/prompts.py — Prompt construction for Supra Move generation
=====================================================================
The system prompt is fixed: compile rules plus one known-good token
module the model is told to follow. The user prompt is wrapped with the
module name and a few extra instructions picked by keyword.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

DEFAULT_MODULE_NAME = "custom_contract"

SYSTEM_PROMPT = """\
You are a Supra Move compiler expert. Generate ONLY code that compiles without errors.

CRITICAL RULES (NEVER BREAK THESE):
1. Functions using borrow_global MUST have "acquires ResourceName"
2. Only import what you actually use - remove unused imports
3. Prefix unused parameters with underscore: _param
4. Use signer::address_of(account) NOT @0x1 for addresses
5. Use std::string::utf8() for string literals

EXACT WORKING TEMPLATE:
module your_address::module_name {
    use std::signer;
    use supra_framework::coin::{Self, BurnCapability, FreezeCapability, MintCapability};

    struct CoinType has key {}

    struct TokenCapabilities has key {
        mint_cap: MintCapability<CoinType>,
        burn_cap: BurnCapability<CoinType>,
        freeze_cap: FreezeCapability<CoinType>,
    }

    fun init_module(account: &signer) acquires TokenCapabilities {
        let addr = signer::address_of(account);
        let (burn_cap, freeze_cap, mint_cap) = coin::initialize<CoinType>(
            account,
            std::string::utf8(b"Token Name"),
            std::string::utf8(b"SYMBOL"),
            8,
            true,
        );
        move_to(account, TokenCapabilities { mint_cap, burn_cap, freeze_cap });

        // If initial mint requested:
        let caps = borrow_global<TokenCapabilities>(addr);
        let coins = coin::mint(amount_with_decimals, &caps.mint_cap);
        coin::deposit(addr, coins);
    }

    public entry fun mint(_admin: &signer, recipient: address, amount: u64) acquires TokenCapabilities {
        let caps = borrow_global<TokenCapabilities>(@your_address);
        let coins = coin::mint(amount, &caps.mint_cap);
        coin::deposit(recipient, coins);
    }

    #[view]
    public fun get_balance(account: address): u64 {
        coin::balance<CoinType>(account)
    }
}

NEVER generate code with compilation errors. Always use this exact pattern."""


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def _keyword_instructions(prompt: str) -> List[str]:
    lowered = prompt.lower()
    instructions: List[str] = []

    # Amount checks are case-sensitive; only the keyword match is not.
    if "mint" in lowered and ("1000000" in prompt or "1 M" in prompt):
        instructions.append("- Mint exactly 1,000,000 tokens (use: 100000000000000 for 8 decimals)")
    if "deployer" in lowered:
        instructions.append("- Mint initial tokens to deployer address using signer::address_of(account)")
    if "balance" in lowered:
        instructions.append("- Include get_balance view function")
    return instructions


def build_enhanced_prompt(prompt: str, context: Optional[Mapping[str, Any]] = None) -> str:
    """Wrap the user's request with module name, keyword hints and the standing requirements."""
    ctx: Dict[str, Any] = dict(context or {})
    module_name = ctx.get("moduleName") or DEFAULT_MODULE_NAME
    instructions = "".join(f"\n{line}" for line in _keyword_instructions(prompt))

    return (
        f"Create a Supra Move smart contract: {prompt}\n"
        f"\n"
        f"Module name: {module_name}\n"
        f"{instructions}\n"
        f"\n"
        f"Requirements:\n"
        f"- Use the exact template pattern provided\n"
        f"- Ensure ALL functions with borrow_global have acquires annotation\n"
        f"- Remove unused imports\n"
        f"- Make it compile without errors or warnings"
    )
