"""
Miniature marketplace backend: customer, shop and product services sharing
bearer-token auth, shop ownership checks and one classified error taxonomy.

Run with:
    uvicorn miniature.main:app --reload
"""
