"""NiceGUI interface for indexing sources and chatting with them.

Responsibilities:
    - Data source submission (text, files, websites) with live status
    - Streamed answer display while fragments arrive
    - One question at a time, only once a source exists

State lives in SessionController; the page only renders it. All work is
delegated to the API over HTTP.
"""
