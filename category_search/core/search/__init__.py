"""Category search pipeline.

resolve -> hook -> authorize -> paginate -> expand children -> compose.
Every collaborator is awaited; nothing here retries or times out.
"""
