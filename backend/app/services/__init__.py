# Services package init
"""
SpellNote Backend - Services Layer
====================================

Service Inventory:
    - SpellChecker (abstract): outbound spell checking client interface
    - YandexSpellerClient: form-encoded POST to Yandex Speller checkText
    - ResponseDecoder: response bytes → CorrectionCandidate list
    - TextReconstructor: original text + candidates → corrected text
    - CorrectionPipeline: the three above behind `await correct(text)`
    - AuthService: Basic credential check against the users table
    - NoteService: correct → persist, and per-user listing
"""
