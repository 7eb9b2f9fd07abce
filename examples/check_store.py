# Example script demonstrating how to use the Docker store checker
from docker_store_check.core import check_store
from docker_store_check.docker import DockerStore

def main():
    # Example parameters
    data_root = "/var/lib/docker"  # Data root of a stopped Docker daemon
    fix_store = False  # Only report broken layers, don't remove them

    # Check the layer store
    store = DockerStore(data_root)
    broken = check_store(store, fix_store)
    print(f"{broken} broken layers in {data_root}")

if __name__ == "__main__":
    main()
