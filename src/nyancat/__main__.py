from nyancat.main_asyncio import run

run()
