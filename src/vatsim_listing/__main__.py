from vatsim_listing.clients.disc import run

if __name__ == "__main__":
    run()
