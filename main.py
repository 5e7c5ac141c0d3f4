from nfse_api.main import run


def main():
    # Lê .env / variáveis de ambiente (NFSE_BASE_URL, NFSE_PFX_BASE64,
    # NFSE_PFX_PASSWORD, PORT) e sobe o gateway com uvicorn.
    run()


if __name__ == "__main__":
    main()
