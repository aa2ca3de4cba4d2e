# Setup instructions returned to the caller after a successful provision.
# Same text for every request; it is written for OpenSUSE (zypper).
SETUP_TRANSCRIPT = """# Step 1: Update system packages
sudo zypper refresh
sudo zypper update -y

# Step 2: Install Docker
sudo zypper install -y docker

# Step 3: Start and enable Docker service
sudo systemctl enable --now docker

# Step 4: Add current user to the Docker group
sudo usermod -aG docker $USER
echo "You may need to log out and back in for group changes to take effect."

# Step 5: Verify Docker installation
docker run hello-world

# Step 6: Create directories for Guacamole setup
mkdir -p ~/guacamole/init
cd ~/guacamole/init

# Step 7: Download MySQL initialization script for Guacamole
docker run --rm guacamole/guacamole /opt/guacamole/bin/initdb.sh --mysql > initdb.sql

# Step 8: Start MySQL container for Guacamole authentication
docker run --name guacamole-mysql \\
  -e MYSQL_ROOT_PASSWORD=MySQLPassword \\
  -e MYSQL_DATABASE=guacamole_db \\
  -e MYSQL_USER=guacamole_user \\
  -e MYSQL_PASSWORD=guacamole_user_password \\
  -v ~/guacamole/init:/docker-entrypoint-initdb.d \\
  -d mysql:8.0

# Wait for MySQL to initialize
sleep 30

# Step 9: Start Guacamole daemon (guacd) container
docker run --name guacamole-guacd -d guacamole/guacd

# Step 10: Start Guacamole web application container
docker run --name guacamole-client \\
  --link guacamole-guacd:guacd \\
  --link guacamole-mysql:mysql \\
  -e MYSQL_DATABASE=guacamole_db \\
  -e MYSQL_USER=guacamole_user \\
  -e MYSQL_PASSWORD=guacamole_user_password \\
  -d -p 8080:8080 \\
  guacamole/guacamole"""
